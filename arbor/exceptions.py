"""
Exceptions raised by arbor estimators.

Every rejected-input condition has its own class so callers can branch on the
kind of failure. All of them derive from :class:`ArborError`; the input
errors also derive from ``ValueError`` and the traversal failure from
``RuntimeError``.
"""


class ArborError(Exception):
    """Base class for all arbor errors."""


class ShapeMismatchError(ArborError, ValueError):
    """Target length differs from the row count, or the column count differs
    from the one the model was trained on."""


class EmptyInputError(ArborError, ValueError):
    """Zero rows were supplied to fit or predict."""


class NotFittedError(ArborError, ValueError):
    """A prediction method was called before fit."""


class ModeMismatchError(ArborError, ValueError):
    """A classification-only method was called on a regression model."""


class InvalidConfigurationError(ArborError, ValueError):
    """A constructor or set_params argument is not valid."""


class TraversalLimitError(ArborError, RuntimeError):
    """Walking the node arena did not reach a leaf within the step cap.

    This only happens if the arena is corrupted and is not recoverable.
    """
