"""
Purity functions used to score candidate splits.

Each function takes a slice of target values and returns a float, 0.0 for a
perfectly pure (or empty) slice. Any callable with the same signature can be
passed to the estimators as ``purity_fn``.
"""

import numpy as np


def _counts(values):
    _, counts = np.unique(np.asarray(values), return_counts=True)
    return counts


def gini(values):
    """Gini index of a set of discrete values, ``1 - sum(p_k ** 2)``."""
    values = np.asarray(values)
    if values.size == 0:
        return 0.0
    p = _counts(values) / values.size
    return float(1.0 - np.sum(p * p))


def entropy(values):
    """Shannon entropy in bits of a set of discrete values."""
    values = np.asarray(values)
    if values.size == 0:
        return 0.0
    p = _counts(values) / values.size
    return float(-np.sum(p * np.log2(p)))


def variance(values):
    """Population variance (mean squared deviation from the mean)."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return 0.0
    return float(np.var(values))


def stdevp(values):
    """Population standard deviation."""
    return float(np.sqrt(variance(values)))
