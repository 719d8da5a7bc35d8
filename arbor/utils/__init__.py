"""
Shared helpers: input validation, data preparation and parallel execution.
"""

from .features import (
    KFold,
    bootstrap,
    class_proportions,
    partition,
    shuffle,
    split_by_filter,
    train_test_split,
)

__all__ = [
    "KFold",
    "bootstrap",
    "class_proportions",
    "partition",
    "shuffle",
    "split_by_filter",
    "train_test_split",
]
