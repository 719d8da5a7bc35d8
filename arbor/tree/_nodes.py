"""
Node types stored in a tree's node arena.

Children are referenced by their integer index in the arena. Node 0 is the
root.
"""

from dataclasses import dataclass, field
from typing import Dict, Union


@dataclass
class DecisionNode:
    column_index: int
    split_point: float
    yes_index: int = -1
    no_index: int = -1
    purity_gain: float = 0.0
    record_count: int = 0

    def routes_yes(self, row) -> bool:
        """Rows strictly greater than the split point take the yes branch."""
        return row[self.column_index] > self.split_point

    def next_index(self, row) -> int:
        return self.yes_index if self.routes_yes(row) else self.no_index


@dataclass
class RegressionLeaf:
    record_count: int
    predicted: float


@dataclass
class ClassificationLeaf:
    record_count: int
    predicted: float
    class_counts: Dict[float, int] = field(default_factory=dict)

    def probabilities(self) -> Dict[float, float]:
        """Share of training rows at this leaf carrying each label."""
        return {
            label: count / self.record_count
            for label, count in self.class_counts.items()
        }


Leaf = Union[RegressionLeaf, ClassificationLeaf]
Node = Union[DecisionNode, RegressionLeaf, ClassificationLeaf]


def is_leaf(node) -> bool:
    return not isinstance(node, DecisionNode)
