"""
arbor: decision trees and random forests for classification and regression.
"""

import logging

from .ensemble.forest import RandomForest
from .exceptions import (
    ArborError,
    EmptyInputError,
    InvalidConfigurationError,
    ModeMismatchError,
    NotFittedError,
    ShapeMismatchError,
    TraversalLimitError,
)
from .tree import DecisionTree, entropy, gini, stdevp, variance
from .utils.base import Mode

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArborError",
    "DecisionTree",
    "EmptyInputError",
    "InvalidConfigurationError",
    "Mode",
    "ModeMismatchError",
    "NotFittedError",
    "RandomForest",
    "ShapeMismatchError",
    "TraversalLimitError",
    "entropy",
    "gini",
    "stdevp",
    "variance",
]

__version__ = "0.1.0"
