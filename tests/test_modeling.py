# tests/test_modeling.py

"""Estimators and the train/validation grid search."""

import numpy as np
import pandas as pd
import pytest
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import FunctionTransformer

from stock_analytics.estimators import RegularizedLinearRegression, RegularizedLogisticRegression
from stock_analytics.tuning import prefixed_grid, train_validation_search


@pytest.fixture
def three_class_data():
    rng = np.random.RandomState(0)
    X = rng.randn(150, 2)
    y = np.where(X[:, 0] > 0.5, "UP", np.where(X[:, 0] < -0.5, "DOWN", "UNCHANGED"))
    return X, y


def test_logistic_regression_learns_three_classes(three_class_data):
    X, y = three_class_data
    clf = RegularizedLogisticRegression(reg_param=0.001).fit(X, y)

    assert list(clf.classes_) == ["DOWN", "UNCHANGED", "UP"]
    assert clf.predict_proba(X).shape == (150, 3)
    np.testing.assert_allclose(clf.predict_proba(X).sum(axis=1), 1.0)
    assert clf.score(X, y) > 0.8
    assert clf.n_iter_ >= 1


def test_strong_regularization_flattens_probabilities(three_class_data):
    X, y = three_class_data
    weak = RegularizedLogisticRegression(reg_param=0.001).fit(X, y)
    strong = RegularizedLogisticRegression(reg_param=2.0, elastic_net_param=1.0).fit(X, y)

    assert strong.predict_proba(X).max() < weak.predict_proba(X).max()


@pytest.mark.parametrize("params", [{"reg_param": 0.0}, {"elastic_net_param": 1.5}])
def test_logistic_regression_rejects_bad_params(three_class_data, params):
    X, y = three_class_data
    with pytest.raises(ValueError):
        RegularizedLogisticRegression(**params).fit(X, y)


def test_linear_regression_without_penalty_is_exact():
    rng = np.random.RandomState(1)
    X = rng.randn(50, 3)
    y = 2.0 * X[:, 0] - X[:, 2] + 5.0

    reg = RegularizedLinearRegression(reg_param=0.0).fit(X, y)
    np.testing.assert_allclose(reg.predict(X), y, atol=1e-8)


def test_linear_regression_penalty_shrinks():
    rng = np.random.RandomState(1)
    X = rng.randn(50, 1)
    y = 3.0 * X[:, 0]

    free = RegularizedLinearRegression(reg_param=0.0).fit(X, y)
    shrunk = RegularizedLinearRegression(reg_param=0.5).fit(X, y)
    assert abs(shrunk.coef_[0]) < abs(free.coef_[0])


def test_prefixed_grid():
    assert prefixed_grid({"reg_param": (0.1, 0.3)}, "regressor") == {
        "regressor__reg_param": [0.1, 0.3]
    }


def _identity_pipeline(estimator):
    return Pipeline([("identity", FunctionTransformer()), ("model", estimator)])


def test_search_picks_best_and_refits(three_class_data):
    X, y = three_class_data
    search = train_validation_search(
        _identity_pipeline(RegularizedLogisticRegression()),
        {"reg_param": [0.001, 5.0], "elastic_net_param": [0.0]},
        pd.DataFrame(X),
        pd.Series(y),
        train_ratio=0.7,
        scoring="accuracy",
        step_name="model",
    )

    assert len(search.cv_results_["params"]) == 2
    assert search.best_params_["model__reg_param"] == 0.001
    # refitted on every row
    assert hasattr(search.best_estimator_.named_steps["model"], "model_")


@pytest.mark.parametrize("grid", [{}, {"reg_param": []}])
def test_search_with_empty_grid(three_class_data, grid):
    X, y = three_class_data
    with pytest.raises(ValueError, match="no combinations"):
        train_validation_search(
            _identity_pipeline(RegularizedLogisticRegression()),
            grid,
            pd.DataFrame(X),
            pd.Series(y),
            train_ratio=0.7,
            scoring="accuracy",
            step_name="model",
        )


def test_logistic_regression_on_a_single_class():
    X = np.arange(10, dtype=float).reshape(5, 2)
    y = ["UP"] * 5
    clf = RegularizedLogisticRegression().fit(X, y)

    assert list(clf.classes_) == ["UP"]
    assert list(clf.predict(X)) == ["UP"] * 5
    np.testing.assert_allclose(clf.predict_proba(X), np.ones((5, 1)))
    assert clf.n_iter_ == 0
