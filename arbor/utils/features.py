"""
Helpers that prepare a feature matrix and its target vector for training.
"""

import numpy as np

from ..exceptions import ShapeMismatchError
from .validation import check_random_state


def _check_lengths(X, y):
    if X.shape[0] != y.shape[0]:
        raise ShapeMismatchError(
            f"X and y have inconsistent lengths: {X.shape[0]} vs {y.shape[0]}"
        )


def bootstrap(X, y, random_state=None, return_oob=False):
    """Resample whole rows with replacement, keeping the row count.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
    y : ndarray of shape (n_samples,)
    random_state : None, int or RandomState, default=None
    return_oob : bool, default=False
        Also return the sorted indices of rows that were never drawn.

    Returns
    -------
    X_sample : ndarray of shape (n_samples, n_features)
    y_sample : ndarray of shape (n_samples,)
    oob_indices : ndarray of int
        Empty unless ``return_oob`` is set.
    """
    X = np.asarray(X)
    y = np.asarray(y)
    _check_lengths(X, y)

    n_samples = X.shape[0]
    random_state = check_random_state(random_state)
    indices = random_state.randint(0, n_samples, n_samples)

    if return_oob:
        drawn = np.bincount(indices, minlength=n_samples)
        oob_indices = np.flatnonzero(drawn == 0)
    else:
        oob_indices = np.empty(0, dtype=int)

    return X[indices], y[indices], oob_indices


def shuffle(X, y, random_state=None):
    """Permute rows, keeping each row paired with its target value."""
    X = np.asarray(X)
    y = np.asarray(y)
    _check_lengths(X, y)

    random_state = check_random_state(random_state)
    permutation = random_state.permutation(X.shape[0])
    return X[permutation], y[permutation]


def split_by_filter(a, mask):
    """Split rows of ``a`` into those where ``mask`` is true and the rest."""
    a = np.asarray(a)
    mask = np.asarray(mask, dtype=bool)
    if a.shape[0] != mask.shape[0]:
        raise ShapeMismatchError(
            f"Filter length {mask.shape[0]} does not match {a.shape[0]} rows"
        )
    return a[mask], a[~mask]


def partition(X, column, split_point):
    """Split a matrix on one column.

    Rows with ``X[:, column] > split_point`` go to the first ("yes") matrix,
    the rest to the second. The boolean mask is returned so the same split
    can be applied to the target.
    """
    X = np.asarray(X)
    mask = X[:, column] > split_point
    yes, no = split_by_filter(X, mask)
    return yes, no, mask


def train_test_split(X, y, ratio):
    """Split rows into train and test sets without shuffling.

    Rows whose index is at most ``(n_samples - 1) * ratio`` go to the
    train set. Shuffle first for a random split.
    """
    if ratio <= 0 or ratio >= 1:
        raise ValueError("ratio must be between 0 and 1")
    X = np.asarray(X)
    y = np.asarray(y)
    _check_lengths(X, y)

    cut_point = (X.shape[0] - 1) * ratio
    mask = np.arange(X.shape[0]) <= cut_point
    X_train, X_test = split_by_filter(X, mask)
    y_train, y_test = split_by_filter(y, mask)
    return (X_train, y_train), (X_test, y_test)


def class_proportions(y):
    """Return ``(label, count, proportion)`` tuples sorted by label."""
    labels, counts = np.unique(np.asarray(y), return_counts=True)
    total = counts.sum()
    return [
        (label.item(), int(count), count / total)
        for label, count in zip(labels, counts)
    ]


class KFold:
    """Iterate over boolean train masks for k-fold cross validation.

    Each fold marks a contiguous block of ``n_samples // k`` rows as
    ``False`` (test) and everything else as ``True`` (train).

    Parameters
    ----------
    n_samples : int
        Number of rows to split into folds.
    k : int
        Number of folds.
    """

    def __init__(self, n_samples, k):
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        self.n_samples = n_samples
        self.k = k
        self.current_fold = 0
        fold_size = n_samples // k
        self._folds = [(i * fold_size, (i + 1) * fold_size) for i in range(k)]

    def __repr__(self):
        return f"KFold(k={self.k}, current_fold={self.current_fold})"

    def __len__(self):
        return self.k

    def __iter__(self):
        index = np.arange(self.n_samples)
        for fold, (start, end) in enumerate(self._folds):
            self.current_fold = fold + 1
            yield (index < start) | (index >= end)
