"""
Tree module initialization.
"""

from ._criterion import entropy, gini, stdevp, variance
from ._nodes import ClassificationLeaf, DecisionNode, RegressionLeaf
from ._splitter import best_split, best_split_matrix
from .tree import DecisionTree

__all__ = [
    "DecisionTree",
    "DecisionNode",
    "RegressionLeaf",
    "ClassificationLeaf",
    "best_split",
    "best_split_matrix",
    "entropy",
    "gini",
    "stdevp",
    "variance",
]
