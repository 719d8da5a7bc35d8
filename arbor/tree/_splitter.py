"""
Split search: find the column and split point that best separate a target.
"""

from typing import Callable, Tuple

import numpy as np

from ..utils.validation import check_random_state

PurityFn = Callable[[np.ndarray], float]


def best_split(values, target, purity_fn: PurityFn) -> Tuple[float, float]:
    """Find the split point on one column that maximises purity gain.

    Candidate split points are the midpoints between adjacent distinct values
    once the column is sorted. For each candidate the gain is

        purity(all) - |left| / n * purity(left) - |right| / n * purity(right)

    Only strictly greater gains replace the current best, so among equal
    gains the lowest split point is kept.

    Parameters
    ----------
    values : array-like of shape (n_samples,)
        Numeric column to test split points on.
    target : array-like of shape (n_samples,)
        Target values aligned with ``values``.
    purity_fn : callable
        Purity function applied to slices of the target.

    Returns
    -------
    split_point : float
    gain : float
        ``(0.0, 0.0)`` for empty input. If every value is identical the
        split point is ``min(values) - 1.0`` with a gain of 0.0.
    """
    values = np.asarray(values, dtype=np.float64)
    target = np.asarray(target)
    n_samples = values.shape[0]
    if n_samples == 0:
        return 0.0, 0.0

    order = np.argsort(values, kind="stable")
    sorted_values = values[order]
    sorted_target = target[order]

    boundaries = np.flatnonzero(sorted_values[:-1] != sorted_values[1:])
    if boundaries.size == 0:
        return float(sorted_values[0]) - 1.0, 0.0

    purity_pre_split = purity_fn(sorted_target)
    best_point, best_gain = 0.0, 0.0
    for idx in boundaries:
        left = sorted_target[: idx + 1]
        right = sorted_target[idx + 1 :]
        gain = (
            purity_pre_split
            - purity_fn(left) * left.shape[0] / n_samples
            - purity_fn(right) * right.shape[0] / n_samples
        )
        if gain > best_gain:
            best_gain = gain
            best_point = (sorted_values[idx] + sorted_values[idx + 1]) / 2.0

    return float(best_point), float(best_gain)


def candidate_columns(n_features, random_features, random_state=None):
    """Columns to scan, optionally a random subset sampled without replacement.

    Subsampling applies only when ``0 < random_features < n_features``. The
    returned columns are in ascending order.
    """
    columns = np.arange(n_features)
    if 0 < random_features < n_features:
        random_state = check_random_state(random_state)
        columns = np.sort(
            random_state.choice(columns, size=random_features, replace=False)
        )
    return columns


def best_split_matrix(
    X, y, purity_fn: PurityFn, random_features=0, random_state=None
) -> Tuple[int, float, float]:
    """Find the best column and split point across a feature matrix.

    Returns
    -------
    column : int
    split_point : float
    gain : float
        The first column reaching the highest strictly positive gain wins.
        ``(0, 0.0, 0.0)`` when no column improves purity.
    """
    X = np.asarray(X, dtype=np.float64)
    best_column, best_point, best_gain = 0, 0.0, 0.0

    for column in candidate_columns(X.shape[1], random_features, random_state):
        point, gain = best_split(X[:, column], y, purity_fn)
        if gain > best_gain:
            best_column, best_point, best_gain = int(column), point, gain

    return best_column, best_point, best_gain
