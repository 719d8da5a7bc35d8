"""
Base classes for all estimators.
"""

from enum import Enum
from numbers import Integral

import numpy as np
from sklearn.metrics import accuracy_score, r2_score

from ..exceptions import InvalidConfigurationError, ModeMismatchError, NotFittedError


class Mode(str, Enum):
    """What the estimator infers: class labels or continuous values."""

    CLASSIFY = "classify"
    REGRESS = "regress"


def check_mode(mode):
    """Convert a mode string or Mode member into a Mode."""
    try:
        return Mode(mode)
    except ValueError:
        raise InvalidConfigurationError(
            f"Mode must be 'classify' or 'regress', got {mode!r}"
        ) from None


def check_positive_int(name, value, minimum=1):
    if not isinstance(value, Integral) or isinstance(value, bool):
        raise InvalidConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}"
        )
    if value < minimum:
        raise InvalidConfigurationError(
            f"{name} must be >= {minimum}, got {value}"
        )


def probabilities_to_array(predictions, classes):
    """Turn ``(label, {label: probability})`` pairs into an array.

    Columns follow ``classes``; labels missing from a mapping get 0.0.
    """
    column = {float(label): i for i, label in enumerate(classes)}
    proba = np.zeros((len(predictions), len(classes)), dtype=np.float64)
    for i, (_, probabilities) in enumerate(predictions):
        for label, p in probabilities.items():
            proba[i, column[label]] = p
    return proba


class BaseEstimator:
    """Base class for all estimators in arbor.

    Subclasses store their constructor arguments as public attributes and
    implement ``_validate_params``, which runs on construction and on every
    ``set_params`` call.
    """

    def _validate_params(self):
        self.mode = check_mode(self.mode)
        if not callable(self.purity_fn):
            raise InvalidConfigurationError(
                f"purity_fn must be callable, got {type(self.purity_fn).__name__}"
            )

    def _is_fitted(self):
        raise NotImplementedError

    def _check_is_fitted(self):
        """Check if the estimator is fitted."""
        if not self._is_fitted():
            raise NotFittedError(
                f"This {type(self).__name__} instance is not fitted yet. "
                "Call 'fit' before using this estimator."
            )

    def _check_classify(self, method):
        if self.mode is not Mode.CLASSIFY:
            raise ModeMismatchError(
                f"{type(self).__name__}.{method} is only valid when mode is "
                f"'classify'"
            )

    def get_params(self, deep=True):
        """Get parameters for this estimator.

        Parameters
        ----------
        deep : bool, default=True
            Kept for API compatibility; arbor estimators hold no nested
            estimators in their parameters.

        Returns
        -------
        params : dict
            Parameter names mapped to their values.
        """
        out = dict()
        for key in self.__dict__:
            if not key.endswith("_") and not key.startswith("_"):
                out[key] = getattr(self, key)
        return out

    def set_params(self, **params):
        """Set the parameters of this estimator.

        The new values are validated immediately.

        Returns
        -------
        self : estimator instance
        """
        if not params:
            return self

        for key, value in params.items():
            if key not in self.get_params():
                raise InvalidConfigurationError(
                    f"Invalid parameter {key} for estimator {type(self).__name__}."
                )
            setattr(self, key, value)
        self._validate_params()
        return self

    def score(self, X, y):
        """Mean accuracy when classifying, R^2 when regressing.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Test samples.
        y : array-like of shape (n_samples,)
            True labels or values for X.

        Returns
        -------
        score : float
        """
        y_pred = self.predict(X)
        if self.mode is Mode.CLASSIFY:
            return accuracy_score(y, y_pred)
        return r2_score(y, y_pred)

    def __repr__(self):
        params = ", ".join(
            f"{key}={getattr(value, '__name__', repr(value))}"
            if callable(value)
            else f"{key}={getattr(value, 'value', value)!r}"
            for key, value in self.get_params().items()
        )
        return f"{type(self).__name__}({params})"
