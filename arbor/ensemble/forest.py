"""
Random Forest implementation.
"""

import logging
import time
from collections import defaultdict

import numpy as np
from sklearn.metrics import accuracy_score, r2_score

from ..exceptions import InvalidConfigurationError
from ..tree.tree import DecisionTree
from ..utils.base import (
    BaseEstimator,
    Mode,
    check_positive_int,
    probabilities_to_array,
)
from ..utils.parallel import parallel_build_trees, parallel_predict_rows
from ..utils.validation import (
    DTYPE,
    check_array,
    check_n_features,
    check_random_state,
    check_X_y,
)

logger = logging.getLogger(__name__)


def _default_random_features(n_features):
    return max(1, int(round(np.sqrt(n_features))))


def _majority(votes):
    """Most frequent value in ``votes``; ties go to the lowest value."""
    labels, counts = np.unique(np.asarray(votes, dtype=DTYPE), return_counts=True)
    return float(labels[np.argmax(counts)])


class RandomForest(BaseEstimator):
    """A random forest of binary decision trees.

    Each tree is fitted on a bootstrap sample of the rows and considers a
    random subset of columns at every split. Predictions are a majority vote
    over the trees when classifying and the mean when regressing.

    Parameters
    ----------
    mode : {"classify", "regress"} or Mode
        Predict class labels or values.
    purity_fn : callable
        Function mapping a slice of target values to an impurity score,
        e.g. :func:`arbor.gini` or :func:`arbor.stdevp`.
    n_estimators : int, default=100
        The number of trees in the forest.
    max_depth : int, default=1000
        The maximum depth of each tree.
    min_rows_per_node : int, default=3
        The minimum number of rows needed to split a node.
    random_features : int, default=None
        The number of columns considered at each split. If None,
        ``round(sqrt(n_features))`` is used. Zero disables subsampling.
    bootstrap : bool, default=True
        Whether bootstrap samples are used when building trees.
    oob_score : bool, default=False
        Whether to use out-of-bag rows to estimate the generalization score.
        Requires ``bootstrap=True``.
    n_jobs : int, default=None
        The number of jobs to run in parallel. None means 1, -1 means all
        processors.
    random_state : int, RandomState instance or None, default=None
        Controls the bootstrapping of the rows and the sampling of the
        columns considered at each split.
    verbose : int, default=0
        Controls the verbosity when fitting and predicting.

    Attributes
    ----------
    estimators_ : list of DecisionTree
    n_features_in_ : int
    n_samples_ : int
    classes_ : ndarray or None
    random_features_ : int
        The column count actually used at each split.
    oob_score_ : float
        Only set when ``oob_score=True``.
    oob_prediction_ : ndarray of shape (n_samples,)
        Only set when ``oob_score=True``. NaN for rows that were never out
        of bag.
    """

    def __init__(
        self,
        mode,
        purity_fn,
        n_estimators: int = 100,
        *,
        max_depth: int = 1000,
        min_rows_per_node: int = 3,
        random_features: int = None,
        bootstrap: bool = True,
        oob_score: bool = False,
        n_jobs: int = None,
        random_state=None,
        verbose: int = 0,
    ):
        self.mode = mode
        self.purity_fn = purity_fn
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.min_rows_per_node = min_rows_per_node
        self.random_features = random_features
        self.bootstrap = bootstrap
        self.oob_score = oob_score
        self.n_jobs = n_jobs
        self.random_state = random_state
        self.verbose = verbose
        self.estimators_ = []
        self.classes_ = None
        self._validate_params()

    def _validate_params(self):
        super()._validate_params()
        check_positive_int("n_estimators", self.n_estimators)
        check_positive_int("max_depth", self.max_depth)
        check_positive_int("min_rows_per_node", self.min_rows_per_node)
        if self.random_features is not None:
            check_positive_int("random_features", self.random_features, minimum=0)
        if self.oob_score and not self.bootstrap:
            raise InvalidConfigurationError(
                "Out of bag estimation only available if bootstrap=True"
            )

    def _is_fitted(self):
        return bool(self.estimators_)

    def fit(self, X, y):
        """Build a forest of trees from the training set (X, y).

        Any previously fitted trees are discarded.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            The training input samples.
        y : array-like of shape (n_samples,)
            Class labels or values, depending on ``mode``.

        Returns
        -------
        self : RandomForest
            Fitted estimator.
        """
        total_start_time = time.time()

        X, y = check_X_y(X, y)

        self.estimators_ = []
        for attr in ("oob_score_", "oob_prediction_"):
            if hasattr(self, attr):
                delattr(self, attr)
        self.n_samples_, self.n_features_in_ = X.shape
        self.classes_ = np.unique(y) if self.mode is Mode.CLASSIFY else None

        if self.random_features is None:
            self.random_features_ = _default_random_features(self.n_features_in_)
        else:
            self.random_features_ = self.random_features

        if self.verbose > 0:
            logger.info(
                "Training %s: n_estimators=%d, max_depth=%d, "
                "min_rows_per_node=%d, random_features=%d, bootstrap=%s, "
                "n_jobs=%s",
                self.mode.value,
                self.n_estimators,
                self.max_depth,
                self.min_rows_per_node,
                self.random_features_,
                self.bootstrap,
                self.n_jobs,
            )
            logger.info("Data: n_samples=%d, n_features=%d", *X.shape)
            if self.mode is Mode.CLASSIFY:
                logger.info("Classes: %s", self.classes_.tolist())

        random_state = check_random_state(self.random_state)
        seeds = random_state.randint(np.iinfo(np.int32).max, size=self.n_estimators)

        trees = [
            DecisionTree(
                self.mode,
                self.purity_fn,
                max_depth=self.max_depth,
                min_rows_per_node=self.min_rows_per_node,
                random_features=self.random_features_,
                bootstrap=self.bootstrap,
                record_oob=self.oob_score,
                random_state=int(seed),
            )
            for seed in seeds
        ]
        self.estimators_ = parallel_build_trees(
            trees, X, y, n_jobs=self.n_jobs, verbose=self.verbose
        )

        if self.oob_score:
            self._set_oob_score(X, y)

        if self.verbose > 0:
            importances = self.feature_importances_
            top = np.argsort(importances)[::-1][:5]
            logger.info(
                "Top features by purity gain: %s",
                ", ".join(f"{i}={importances[i]:.4f}" for i in top),
            )
            logger.info(
                "Total training time: %.4f seconds", time.time() - total_start_time
            )

        return self

    def _set_oob_score(self, X, y):
        """Score each row using only the trees that did not train on it."""
        n_samples = X.shape[0]
        n_predictions = np.zeros(n_samples, dtype=int)

        if self.mode is Mode.CLASSIFY:
            class_index = {float(label): i for i, label in enumerate(self.classes_)}
            votes = np.zeros((n_samples, len(self.classes_)), dtype=int)
        else:
            totals = np.zeros(n_samples, dtype=DTYPE)

        for tree in self.estimators_:
            rows = tree.oob_indices_
            if rows.size == 0:
                continue
            predictions = tree.predict(X[rows], skip_checks=True)
            n_predictions[rows] += 1
            if self.mode is Mode.CLASSIFY:
                columns = [class_index[p] for p in predictions]
                votes[rows, columns] += 1
            else:
                totals[rows] += predictions

        has_oob = n_predictions > 0
        oob_prediction = np.full(n_samples, np.nan, dtype=DTYPE)
        if self.mode is Mode.CLASSIFY:
            oob_prediction[has_oob] = self.classes_[np.argmax(votes[has_oob], axis=1)]
        else:
            oob_prediction[has_oob] = totals[has_oob] / n_predictions[has_oob]
        self.oob_prediction_ = oob_prediction

        if not has_oob.all():
            logger.warning(
                "%d rows were never left out of a bootstrap sample; they are "
                "excluded from the out-of-bag score",
                int(np.sum(~has_oob)),
            )
        if not has_oob.any():
            self.oob_score_ = np.nan
        elif self.mode is Mode.CLASSIFY:
            self.oob_score_ = accuracy_score(y[has_oob], oob_prediction[has_oob])
        else:
            self.oob_score_ = r2_score(y[has_oob], oob_prediction[has_oob])

    def _validate_X_predict(self, X):
        self._check_is_fitted()
        X = check_array(X)
        check_n_features(X, self.n_features_in_)
        return X

    def _predict_row(self, row):
        votes = [tree.predict(row, skip_checks=True)[0] for tree in self.estimators_]
        if self.mode is Mode.REGRESS:
            return float(np.mean(votes))
        return _majority(votes)

    def _predict_row_with_probabilities(self, row):
        votes = []
        mass = defaultdict(float)
        for tree in self.estimators_:
            label, probabilities = tree.predict_with_probabilities(
                row, skip_checks=True
            )[0]
            votes.append(label)
            for key, p in probabilities.items():
                mass[key] += p

        total = sum(mass.values())
        return _majority(votes), {key: mass[key] / total for key in sorted(mass)}

    def predict(self, X):
        """Predict a label or value for each row of X.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            The input samples.

        Returns
        -------
        y : ndarray of shape (n_samples,)
            Majority vote of the trees when classifying, their mean when
            regressing.
        """
        X = self._validate_X_predict(X)
        predictions = parallel_predict_rows(
            self._predict_row, X, n_jobs=self.n_jobs, verbose=self.verbose
        )
        return np.array(predictions, dtype=DTYPE)

    def predict_with_probabilities(self, X):
        """Predict labels along with per-label probabilities.

        The leaf probabilities of every tree are summed per label and then
        divided by their total, so each row's probabilities sum to one.

        Returns
        -------
        predictions : list of (float, dict)
            The majority label and a ``{label: probability}`` mapping per row.
        """
        self._check_classify("predict_with_probabilities")
        X = self._validate_X_predict(X)
        return parallel_predict_rows(
            self._predict_row_with_probabilities,
            X,
            n_jobs=self.n_jobs,
            verbose=self.verbose,
        )

    def predict_proba(self, X):
        """Predict class probabilities for X.

        Returns
        -------
        proba : ndarray of shape (n_samples, n_classes)
            Columns follow ``classes_``.
        """
        return probabilities_to_array(
            self.predict_with_probabilities(X), self.classes_
        )

    def purity_gains(self):
        """Element-wise mean of the trees' weighted purity gains.

        Returns
        -------
        gains : ndarray of shape (n_features_in_,)
        """
        self._check_is_fitted()
        gains = np.zeros(self.n_features_in_, dtype=DTYPE)
        for tree in self.estimators_:
            gains += tree.purity_gains()
        return gains / len(self.estimators_)

    @property
    def feature_importances_(self):
        return self.purity_gains()
