"""
Binary decision tree for classification and regression.
"""

import logging
from dataclasses import dataclass
from numbers import Integral
from typing import Dict, List, Tuple

import numpy as np

from ..exceptions import InvalidConfigurationError, TraversalLimitError
from ..utils.base import (
    BaseEstimator,
    Mode,
    check_positive_int,
    probabilities_to_array,
)
from ..utils.features import bootstrap, partition, split_by_filter
from ..utils.validation import (
    DTYPE,
    check_array,
    check_n_features,
    check_random_state,
    check_X_y,
)
from ._nodes import (
    ClassificationLeaf,
    DecisionNode,
    Leaf,
    Node,
    RegressionLeaf,
    is_leaf,
)
from ._splitter import best_split_matrix

logger = logging.getLogger(__name__)

# Hard caps that guarantee growth and traversal terminate.
MAX_RECURSIONS = 10000
MAX_SPLITS = 10000
MAX_TRAVERSAL_STEPS = 10000

_YES, _NO = "yes", "no"


@dataclass
class _GrowthContext:
    """Counters for one call to fit, passed through every growth step."""

    random_state: np.random.RandomState
    recursions: int = 0
    splits: int = 0
    depth: int = 0


class DecisionTree(BaseEstimator):
    """A binary decision tree.

    Each decision node sends a row to its "yes" child when
    ``row[column_index] > split_point`` and to its "no" child otherwise.
    Nodes live in the ``nodes_`` list and refer to their children by index;
    ``nodes_[0]`` is the root.

    Parameters
    ----------
    mode : {"classify", "regress"} or Mode
        Predict class labels (majority label at each leaf) or values (mean
        target at each leaf).
    purity_fn : callable
        Function mapping a slice of target values to an impurity score,
        e.g. :func:`arbor.gini` or :func:`arbor.stdevp`.
    max_depth : int, default=15
        Nodes deeper than this (the root has depth 1) become leaves.
    min_rows_per_node : int, default=3
        Nodes with fewer rows become leaves, and a split is rejected if
        either side would have fewer rows.
    random_features : int, default=0
        If positive and below the column count, each split only considers
        this many randomly chosen columns. Zero or negative disables
        subsampling.
    bootstrap : bool, default=False
        Train on a resample of the rows drawn with replacement.
    record_oob : bool, default=False
        Keep the indices of rows left out of the bootstrap sample in
        ``oob_indices_``. Requires ``bootstrap=True``.
    random_state : int, RandomState instance or None, default=None
        Controls bootstrapping and column subsampling.

    Attributes
    ----------
    nodes_ : list of DecisionNode, RegressionLeaf or ClassificationLeaf
    n_features_in_ : int
        Number of columns seen during fit.
    n_samples_ : int
        Number of rows passed to fit.
    classes_ : ndarray or None
        Sorted distinct labels when classifying.
    max_depth_reached_ : int
    n_splits_ : int
    oob_indices_ : ndarray or None
    """

    def __init__(
        self,
        mode,
        purity_fn,
        *,
        max_depth: int = 15,
        min_rows_per_node: int = 3,
        random_features: int = 0,
        bootstrap: bool = False,
        record_oob: bool = False,
        random_state=None,
    ):
        self.mode = mode
        self.purity_fn = purity_fn
        self.max_depth = max_depth
        self.min_rows_per_node = min_rows_per_node
        self.random_features = random_features
        self.bootstrap = bootstrap
        self.record_oob = record_oob
        self.random_state = random_state
        self.nodes_: List[Node] = []
        self._validate_params()

    def _validate_params(self):
        super()._validate_params()
        check_positive_int("max_depth", self.max_depth)
        check_positive_int("min_rows_per_node", self.min_rows_per_node)
        if not isinstance(self.random_features, Integral):
            raise InvalidConfigurationError(
                f"random_features must be an integer, got "
                f"{type(self.random_features).__name__}"
            )
        if self.record_oob and not self.bootstrap:
            raise InvalidConfigurationError(
                "Out of bag indices are only available if bootstrap=True"
            )

    def _is_fitted(self):
        return bool(self.nodes_)

    @property
    def node_count(self):
        return len(self.nodes_)

    def fit(self, X, y, skip_checks=False):
        """Grow the tree from the training set (X, y).

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
        y : array-like of shape (n_samples,)
            Class labels or values, depending on ``mode``.
        skip_checks : bool, default=False
            Skip input validation. Used by callers that already validated X
            and y.

        Returns
        -------
        self : DecisionTree
        """
        if skip_checks:
            X = np.asarray(X, dtype=DTYPE)
            y = np.asarray(y, dtype=DTYPE)
        else:
            X, y = check_X_y(X, y)

        random_state = check_random_state(self.random_state)
        self.nodes_ = []
        self.n_samples_, self.n_features_in_ = X.shape
        self.classes_ = np.unique(y) if self.mode is Mode.CLASSIFY else None
        self.oob_indices_ = None

        if self.bootstrap:
            X, y, oob_indices = bootstrap(
                X, y, random_state=random_state, return_oob=self.record_oob
            )
            if self.record_oob:
                self.oob_indices_ = oob_indices
        else:
            X, y = X.copy(), y.copy()

        context = _GrowthContext(random_state=random_state)
        self._grow(X, y, context)

        self.max_depth_reached_ = context.depth
        self.n_splits_ = context.splits
        logger.debug(
            "Tree trained on %d rows: %d nodes, %d splits, depth %d",
            self.n_samples_,
            self.node_count,
            self.n_splits_,
            self.max_depth_reached_,
        )
        return self

    def _grow(self, X, y, context):
        """Grow the tree depth first from the root.

        Work items are ``(X, y, parent_depth, parent_index, branch)``. The
        "no" side is pushed before the "yes" side, so yes subtrees are built
        first and node indices follow pre-order, children always after their
        parent.
        """
        stack = [(X, y, 0, None, None)]
        while stack:
            X, y, parent_depth, parent_index, branch = stack.pop()
            context.recursions += 1
            depth = parent_depth + 1
            context.depth = max(context.depth, depth)

            children = self._split_or_none(X, y, depth, context)
            # The parent's rows are not needed past this point.
            del X

            if children is None:
                index = self._add_leaf(y)
            else:
                node, (X_yes, y_yes), (X_no, y_no) = children
                index = len(self.nodes_)
                self.nodes_.append(node)
                stack.append((X_no, y_no, depth, index, _NO))
                stack.append((X_yes, y_yes, depth, index, _YES))

            if parent_index is not None:
                parent = self.nodes_[parent_index]
                if branch == _YES:
                    parent.yes_index = index
                else:
                    parent.no_index = index

    def _split_or_none(self, X, y, depth, context):
        """Return the decision node and both sides, or None for a leaf."""
        n_rows = X.shape[0]

        if context.recursions > MAX_RECURSIONS:
            if context.recursions == MAX_RECURSIONS + 1:
                logger.warning(
                    "Tree growth reached %d recursions; remaining nodes "
                    "become leaves",
                    MAX_RECURSIONS,
                )
            return None
        if context.splits > MAX_SPLITS:
            return None
        if depth > self.max_depth or n_rows < self.min_rows_per_node:
            return None
        if np.all(y == y[0]):
            return None

        column, split_point, gain = best_split_matrix(
            X,
            y,
            self.purity_fn,
            random_features=self.random_features,
            random_state=context.random_state,
        )
        if gain <= 0.0:
            return None

        X_yes, X_no, mask = partition(X, column, split_point)
        if (
            X_yes.shape[0] < self.min_rows_per_node
            or X_no.shape[0] < self.min_rows_per_node
        ):
            return None
        y_yes, y_no = split_by_filter(y, mask)

        context.splits += 1
        if context.splits == MAX_SPLITS + 1:
            logger.warning(
                "Tree growth reached %d splits; remaining nodes become leaves",
                MAX_SPLITS,
            )
        node = DecisionNode(
            column_index=column,
            split_point=split_point,
            purity_gain=gain,
            record_count=n_rows,
        )
        return node, (X_yes, y_yes), (X_no, y_no)

    def _add_leaf(self, y):
        index = len(self.nodes_)
        record_count = int(y.shape[0])

        if self.mode is Mode.CLASSIFY:
            labels, counts = np.unique(y, return_counts=True)
            # np.unique sorts labels, so ties go to the lowest label.
            predicted = float(labels[np.argmax(counts)])
            class_counts = {
                float(label): int(count) for label, count in zip(labels, counts)
            }
            leaf = ClassificationLeaf(record_count, predicted, class_counts)
        else:
            leaf = RegressionLeaf(record_count, float(np.mean(y)))

        self.nodes_.append(leaf)
        return index

    def _validate_X_predict(self, X, skip_checks):
        if skip_checks:
            return np.asarray(X, dtype=DTYPE)
        self._check_is_fitted()
        X = check_array(X)
        check_n_features(X, self.n_features_in_)
        return X

    def _leaf_index(self, row):
        index = 0
        for _ in range(MAX_TRAVERSAL_STEPS):
            node = self.nodes_[index]
            if is_leaf(node):
                return index
            index = node.next_index(row)
        raise TraversalLimitError(
            f"No leaf reached after {MAX_TRAVERSAL_STEPS} steps; the node "
            "arena is corrupted"
        )

    def apply(self, X, skip_checks=False):
        """Return the index of the leaf each row ends up in."""
        X = self._validate_X_predict(X, skip_checks)
        return np.array([self._leaf_index(row) for row in X], dtype=np.intp)

    def _leaves(self, X, skip_checks) -> List[Leaf]:
        X = self._validate_X_predict(X, skip_checks)
        return [self.nodes_[self._leaf_index(row)] for row in X]

    def predict(self, X, skip_checks=False):
        """Predict a label or value for each row of X.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
        skip_checks : bool, default=False

        Returns
        -------
        y : ndarray of shape (n_samples,)
        """
        leaves = self._leaves(X, skip_checks)
        return np.array([leaf.predicted for leaf in leaves], dtype=DTYPE)

    def predict_with_class_counts(
        self, X, skip_checks=False
    ) -> List[Tuple[float, Dict[float, int]]]:
        """Predict labels along with the training label counts of each leaf."""
        self._check_classify("predict_with_class_counts")
        return [
            (leaf.predicted, dict(leaf.class_counts))
            for leaf in self._leaves(X, skip_checks)
        ]

    def predict_with_probabilities(
        self, X, skip_checks=False
    ) -> List[Tuple[float, Dict[float, float]]]:
        """Predict labels along with per-label probabilities of each leaf.

        The probability of a label is its count at the leaf divided by the
        leaf's record count.
        """
        self._check_classify("predict_with_probabilities")
        return [
            (leaf.predicted, leaf.probabilities())
            for leaf in self._leaves(X, skip_checks)
        ]

    def predict_proba(self, X):
        """Class probabilities as an array with columns in ``classes_`` order."""
        return probabilities_to_array(
            self.predict_with_probabilities(X), self.classes_
        )

    def purity_gains(self):
        """Purity gain per column, weighted by the share of rows split.

        Each decision node adds ``purity_gain * record_count / n_samples_``
        to the entry of the column it splits on.

        Returns
        -------
        gains : ndarray of shape (n_features_in_,)
        """
        self._check_is_fitted()
        gains = np.zeros(self.n_features_in_, dtype=DTYPE)
        for node in self.nodes_:
            if not is_leaf(node):
                gains[node.column_index] += (
                    node.purity_gain * node.record_count / self.n_samples_
                )
        return gains

    @property
    def feature_importances_(self):
        return self.purity_gains()

    def get_depth(self):
        """Number of decision nodes on the longest root-to-leaf path."""
        self._check_is_fitted()
        depth = 0
        stack = [(0, 0)]
        # A well formed arena visits every node exactly once.
        visits = 0
        while stack:
            visits += 1
            if visits > len(self.nodes_):
                raise TraversalLimitError(
                    "Node arena has a cycle; a node was reached more than once"
                )
            index, level = stack.pop()
            node = self.nodes_[index]
            if is_leaf(node):
                depth = max(depth, level)
            else:
                stack.append((node.yes_index, level + 1))
                stack.append((node.no_index, level + 1))
        return depth
