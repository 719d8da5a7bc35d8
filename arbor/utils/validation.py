"""
Utilities for input validation and data processing.
"""

import numpy as np
import pandas as pd
from scipy.sparse import issparse

from ..exceptions import EmptyInputError, ShapeMismatchError

DTYPE = np.float64


def check_array(
    X,
    dtype=DTYPE,
    ensure_2d=True,
    ensure_min_samples=1,
    ensure_min_features=1,
    copy=True,
):
    """Input validation on an array, list, DataFrame or similar.

    Parameters
    ----------
    X : array-like
        Input object to check / convert.
    dtype : dtype, default=np.float64
        Data type to force.
    ensure_2d : bool, default=True
        Whether to make X at least 2d.
    ensure_min_samples : int, default=1
        Make sure that X has at least this number of samples.
    ensure_min_features : int, default=1
        Make sure that X has at least this number of features.
    copy : bool, default=True
        Whether a forced copy will be triggered.

    Returns
    -------
    X_converted : ndarray
        The converted and validated X.
    """
    if issparse(X):
        raise TypeError(
            "Sparse input is not supported. Use X.toarray() to convert to a "
            "dense numpy array."
        )

    if isinstance(X, (pd.DataFrame, pd.Series)):
        X = X.to_numpy(dtype=dtype)
    elif isinstance(X, np.ndarray):
        if copy:
            X = np.array(X, dtype=dtype)
        else:
            X = np.asarray(X, dtype=dtype)
    else:
        X = np.array(X, dtype=dtype)

    if ensure_2d:
        if X.ndim == 1:
            # An empty list has no rows rather than one empty row.
            X = X.reshape(-1, 1) if X.size else X.reshape(0, 0)
        elif X.ndim == 0:
            X = X.reshape(1, 1)

    if X.ndim > 2:
        raise ShapeMismatchError(f"Found array with dim {X.ndim}. Expected <= 2.")

    if ensure_min_samples > 0 and X.shape[0] < ensure_min_samples:
        raise EmptyInputError(
            f"Found array with {X.shape[0]} sample(s) but a minimum of "
            f"{ensure_min_samples} is required."
        )

    if ensure_min_features > 0 and X.ndim > 1 and X.shape[1] < ensure_min_features:
        raise EmptyInputError(
            f"Found array with {X.shape[1]} feature(s) but a minimum of "
            f"{ensure_min_features} is required."
        )

    return X


def column_or_1d(y, dtype=DTYPE):
    """Ravel a target vector, rejecting anything with more than one column."""
    if isinstance(y, (pd.DataFrame, pd.Series)):
        y = y.to_numpy(dtype=dtype)
    y = np.array(y, dtype=dtype)

    if y.ndim == 2 and y.shape[1] == 1:
        return y.ravel()
    if y.ndim > 1:
        raise ShapeMismatchError(f"y should be a 1d array, got shape {y.shape}.")
    return np.atleast_1d(y)


def check_X_y(X, y, dtype=DTYPE, ensure_min_samples=1, ensure_min_features=1):
    """Input validation for a feature matrix and its target vector.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Input data.
    y : array-like of shape (n_samples,)
        Target values.
    dtype : dtype, default=np.float64
        Data type to force.
    ensure_min_samples : int, default=1
        Make sure that X and y have at least this number of samples.
    ensure_min_features : int, default=1
        Make sure that X has at least this number of features.

    Returns
    -------
    X_converted : ndarray of shape (n_samples, n_features)
    y_converted : ndarray of shape (n_samples,)
    """
    X = check_array(
        X,
        dtype=dtype,
        ensure_min_samples=ensure_min_samples,
        ensure_min_features=ensure_min_features,
    )
    y = column_or_1d(y, dtype=dtype)

    if y.shape[0] == 0:
        raise EmptyInputError("Found empty target vector.")

    if X.shape[0] != y.shape[0]:
        raise ShapeMismatchError(
            f"X and y have inconsistent lengths: {X.shape[0]} vs {y.shape[0]}"
        )

    return X, y


def check_n_features(X, n_features):
    """Check that X has the column count a model was trained on."""
    if X.shape[1] != n_features:
        raise ShapeMismatchError(
            f"X has {X.shape[1]} features, but the model was trained on "
            f"{n_features} features."
        )


def check_random_state(seed):
    """Turn seed into a np.random.RandomState instance.

    Parameters
    ----------
    seed : None, int, or RandomState instance
        If seed is None, return the RandomState singleton used by np.random.
        If seed is an int, return a new RandomState instance seeded with seed.
        If seed is already a RandomState instance, return it.

    Returns
    -------
    random_state : RandomState instance
        The random state object based on seed.
    """
    if seed is None or seed is np.random:
        return np.random.mtrand._rand
    if isinstance(seed, (int, np.integer)):
        return np.random.RandomState(seed)
    if isinstance(seed, np.random.RandomState):
        return seed
    raise ValueError(
        f"{seed} cannot be used to seed a numpy.random.RandomState instance"
    )
