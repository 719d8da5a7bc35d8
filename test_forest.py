#!/usr/bin/env python
"""
Tests for RandomForest training, voting and probability aggregation.
"""
import logging

import numpy as np
import pytest
from sklearn.datasets import load_iris, make_regression
from sklearn.metrics import r2_score

from arbor import (
    DecisionTree,
    EmptyInputError,
    InvalidConfigurationError,
    ModeMismatchError,
    NotFittedError,
    RandomForest,
    ShapeMismatchError,
    gini,
    stdevp,
)
from arbor.tree import ClassificationLeaf, DecisionNode
from arbor.utils import shuffle, train_test_split
from arbor.utils.parallel import _partition_estimators


def _manual_tree(gain=0.4):
    """Root splits column 0 at 10; both leaves hold 5 fives and 15 sixes."""
    tree = DecisionTree("classify", gini)
    tree.n_samples_ = 20
    tree.n_features_in_ = 2
    tree.classes_ = np.array([5.0, 6.0])
    tree.nodes_ = [
        DecisionNode(0, 10.0, yes_index=1, no_index=2, purity_gain=gain, record_count=20),
        ClassificationLeaf(20, 5.0, {5.0: 5, 6.0: 15}),
        ClassificationLeaf(20, 6.0, {5.0: 5, 6.0: 15}),
    ]
    return tree


def build_forest_manually(gains=(0.4, 0.4, 0.4)):
    forest = RandomForest("classify", gini, n_estimators=len(gains))
    forest.estimators_ = [_manual_tree(gain) for gain in gains]
    forest.n_samples_ = 20
    forest.n_features_in_ = 2
    forest.classes_ = np.array([5.0, 6.0])
    return forest


def test_predict_manual_forest():
    forest = build_forest_manually()
    assert forest.predict([[11, 11], [9, 9]]).tolist() == [5.0, 6.0]


def test_predict_with_probabilities_manual_forest():
    forest = build_forest_manually()
    result = forest.predict_with_probabilities([[11, 11], [9, 9]])
    assert result[0] == (5.0, {5.0: 0.25, 6.0: 0.75})
    assert result[1] == (6.0, {5.0: 0.25, 6.0: 0.75})
    np.testing.assert_allclose(
        forest.predict_proba([[11, 11]]), [[0.25, 0.75]]
    )


def test_purity_gains_are_tree_mean():
    forest = build_forest_manually(gains=(0.3, 0.6, 0.9))
    np.testing.assert_allclose(forest.purity_gains(), [0.6, 0.0])
    np.testing.assert_allclose(forest.feature_importances_, [0.6, 0.0])


def test_majority_vote_tie_goes_to_lowest_label():
    forest = build_forest_manually(gains=(0.4, 0.4))
    forest.estimators_[1].nodes_[1] = ClassificationLeaf(20, 6.0, {6.0: 20})
    assert forest.predict([[11, 11]]).tolist() == [5.0]


def test_classification_accuracy():
    X, y = load_iris(return_X_y=True)
    X, y = shuffle(X, y, random_state=0)
    (X_train, y_train), (X_test, y_test) = train_test_split(X, y, 0.8)

    forest = RandomForest("classify", gini, n_estimators=25, random_state=0)
    forest.fit(X_train, y_train)
    assert forest.random_features_ == 2
    assert len(forest.estimators_) == 25
    assert forest.score(X_test, y_test) > 0.8


def test_regression_fit():
    X, y = make_regression(n_samples=200, n_features=4, noise=0.1, random_state=0)
    forest = RandomForest("regress", stdevp, n_estimators=20, random_state=0)
    forest.fit(X, y)
    assert forest.classes_ is None
    assert forest.score(X, y) > 0.7
    assert forest.purity_gains().shape == (4,)


def test_constructor_exceptions():
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classification", gini)
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classify", None)
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classify", gini, n_estimators=0)
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classify", gini, random_features=-1)
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classify", gini, min_rows_per_node=0)
    with pytest.raises(InvalidConfigurationError):
        RandomForest("classify", gini, bootstrap=False, oob_score=True)


def test_input_exceptions():
    forest = RandomForest("classify", gini, n_estimators=3)
    with pytest.raises(NotFittedError):
        forest.predict([[1, 1]])
    with pytest.raises(NotFittedError):
        forest.purity_gains()
    with pytest.raises(EmptyInputError):
        forest.fit([], [])
    with pytest.raises(ShapeMismatchError):
        forest.fit([[1, 1]], [1, 2])

    X, y = load_iris(return_X_y=True)
    forest.fit(X, y)
    with pytest.raises(ShapeMismatchError):
        forest.predict([[1, 1]])

    regressor = RandomForest("regress", stdevp, n_estimators=3).fit(X, y)
    with pytest.raises(ModeMismatchError):
        regressor.predict_with_probabilities(X)


def test_probabilities_sum_to_one():
    X, y = load_iris(return_X_y=True)
    forest = RandomForest("classify", gini, n_estimators=10, random_state=1).fit(X, y)
    for label, probabilities in forest.predict_with_probabilities(X[::10]):
        assert sum(probabilities.values()) == pytest.approx(1.0)
        assert list(probabilities) == sorted(probabilities)
        assert label in forest.classes_

    proba = forest.predict_proba(X)
    assert proba.shape == (150, 3)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)


def test_oob_score():
    X, y = load_iris(return_X_y=True)
    forest = RandomForest(
        "classify", gini, n_estimators=25, oob_score=True, random_state=0
    ).fit(X, y)
    assert 0.0 < forest.oob_score_ <= 1.0
    assert forest.oob_prediction_.shape == (150,)
    for tree in forest.estimators_:
        assert tree.oob_indices_ is not None


def test_oob_score_regression():
    X, y = make_regression(n_samples=200, n_features=4, noise=0.1, random_state=0)
    forest = RandomForest(
        "regress", stdevp, n_estimators=25, oob_score=True, random_state=0
    ).fit(X, y)
    has_oob = ~np.isnan(forest.oob_prediction_)
    assert has_oob.sum() > 0
    assert forest.oob_score_ == pytest.approx(
        r2_score(y[has_oob], forest.oob_prediction_[has_oob])
    )
    assert forest.oob_score_ > 0.5


def test_rows_never_out_of_bag_are_nan(caplog):
    caplog.set_level(logging.WARNING, logger="arbor")
    X, y = load_iris(return_X_y=True)
    forest = RandomForest(
        "classify", gini, n_estimators=1, oob_score=True, random_state=0
    ).fit(X, y)

    oob_rows = forest.estimators_[0].oob_indices_
    drawn_rows = np.setdiff1d(np.arange(150), oob_rows)
    assert np.isnan(forest.oob_prediction_[drawn_rows]).all()
    assert not np.isnan(forest.oob_prediction_[oob_rows]).any()
    assert 0.0 <= forest.oob_score_ <= 1.0
    assert any(
        "never left out" in r.getMessage()
        for r in caplog.records
        if r.levelno == logging.WARNING
    )


def test_oob_score_without_any_out_of_bag_rows():
    """A single row is drawn by every bootstrap, so nothing can be scored."""
    forest = RandomForest(
        "classify", gini, n_estimators=3, oob_score=True, random_state=0
    ).fit([[1.0, 2.0]], [1.0])
    assert np.isnan(forest.oob_score_)
    assert np.isnan(forest.oob_prediction_).all()


def test_refit_without_oob_clears_oob_results():
    X, y = load_iris(return_X_y=True)
    forest = RandomForest(
        "classify", gini, n_estimators=5, oob_score=True, random_state=0
    ).fit(X, y)
    assert hasattr(forest, "oob_score_")

    forest.set_params(oob_score=False)
    forest.fit(X, y)
    assert not hasattr(forest, "oob_score_")
    assert not hasattr(forest, "oob_prediction_")


def test_random_state_and_n_jobs_reproducible():
    X, y = load_iris(return_X_y=True)
    serial = RandomForest("classify", gini, n_estimators=8, n_jobs=1, random_state=3)
    threaded = RandomForest("classify", gini, n_estimators=8, n_jobs=2, random_state=3)
    np.testing.assert_array_equal(
        serial.fit(X, y).predict(X), threaded.fit(X, y).predict(X)
    )
    np.testing.assert_allclose(serial.purity_gains(), threaded.purity_gains())


def test_refit_replaces_trees():
    X, y = load_iris(return_X_y=True)
    forest = RandomForest("classify", gini, n_estimators=4, random_state=0).fit(X, y)
    first = list(forest.estimators_)
    forest.set_params(n_estimators=6)
    forest.fit(X, y)
    assert len(forest.estimators_) == 6
    assert not any(tree in first for tree in forest.estimators_)


def test_verbose_logging(caplog):
    X, y = load_iris(return_X_y=True)
    caplog.set_level(logging.INFO, logger="arbor")
    RandomForest("classify", gini, n_estimators=2, verbose=1, random_state=0).fit(X, y)
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Training classify") for message in messages)
    assert any("Total training time" in message for message in messages)

    caplog.clear()
    RandomForest("classify", gini, n_estimators=2, random_state=0).fit(X, y)
    assert not [r for r in caplog.records if r.levelno == logging.INFO]


def test_partition_estimators():
    assert _partition_estimators(5, 2) == (2, [3, 2])
    assert _partition_estimators(2, 4) == (2, [1, 1])


if __name__ == "__main__":
    pytest.main([__file__])
