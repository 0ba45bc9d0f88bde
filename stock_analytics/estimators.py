# stock_analytics/estimators.py

"""
Linear estimators parameterized by `reg_param` (lambda) and
`elastic_net_param` (alpha), with the penalty scaled per sample:

    mean_loss(w) + reg_param * (alpha * |w|_1 + (1 - alpha) / 2 * |w|_2^2)

scikit-learn scales its penalties against the summed loss instead, so the
equivalent C / alpha depends on the number of training rows and is only
known at fit time. Features are standardized before fitting.
"""

from __future__ import annotations

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, RegressorMixin
from sklearn.dummy import DummyClassifier
from sklearn.linear_model import LinearRegression, LogisticRegression, Ridge
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

from .config import MAX_ITER


class RegularizedLogisticRegression(ClassifierMixin, BaseEstimator):
    """
    Multinomial logistic regression with an elastic-net penalty.

    Fitting on a single class yields a constant predictor for that class.
    """

    def __init__(
        self,
        reg_param: float = 0.1,
        elastic_net_param: float = 0.0,
        standardize: bool = True,
        max_iter: int = MAX_ITER,
    ):
        self.reg_param = reg_param
        self.elastic_net_param = elastic_net_param
        self.standardize = standardize
        self.max_iter = max_iter

    def fit(self, X, y):
        if self.reg_param <= 0:
            raise ValueError(f"reg_param must be > 0, got {self.reg_param}")
        if not 0.0 <= self.elastic_net_param <= 1.0:
            raise ValueError(
                f"elastic_net_param must be in [0, 1], got {self.elastic_net_param}"
            )

        X = np.asarray(X, dtype=float)
        n_samples = X.shape[0]

        classes = np.unique(np.asarray(y))
        if classes.size == 1:
            print(
                f"[estimators] Only one class ({classes[0]}) in {n_samples} rows, "
                f"fitting a constant predictor"
            )
            clf = DummyClassifier(strategy="most_frequent")
            steps = [clf]
        else:
            clf = LogisticRegression(
                penalty="elasticnet",
                solver="saga",
                l1_ratio=self.elastic_net_param,
                C=1.0 / (self.reg_param * n_samples),
                max_iter=self.max_iter,
            )
            steps = [StandardScaler(), clf] if self.standardize else [clf]
        self.model_ = make_pipeline(*steps)
        self.model_.fit(X, y)

        self.classes_ = clf.classes_
        self.n_iter_ = int(np.max(clf.n_iter_)) if hasattr(clf, "n_iter_") else 0
        self.n_features_in_ = X.shape[1]
        return self

    def predict(self, X):
        check_is_fitted(self, "model_")
        return self.model_.predict(np.asarray(X, dtype=float))

    def predict_proba(self, X):
        check_is_fitted(self, "model_")
        return self.model_.predict_proba(np.asarray(X, dtype=float))


class RegularizedLinearRegression(RegressorMixin, BaseEstimator):
    """Least squares with an L2 penalty (ordinary least squares when reg_param=0)."""

    def __init__(self, reg_param: float = 0.0, standardize: bool = True):
        self.reg_param = reg_param
        self.standardize = standardize

    def fit(self, X, y):
        if self.reg_param < 0:
            raise ValueError(f"reg_param must be >= 0, got {self.reg_param}")

        X = np.asarray(X, dtype=float)
        n_samples = X.shape[0]

        if self.reg_param == 0:
            reg = LinearRegression()
        else:
            # (1/2n)|y - Xw|^2 + (lambda/2)|w|^2  ==  |y - Xw|^2 + n*lambda*|w|^2
            reg = Ridge(alpha=self.reg_param * n_samples)
        steps = [StandardScaler(), reg] if self.standardize else [reg]
        self.model_ = make_pipeline(*steps)
        self.model_.fit(X, y)

        self.coef_ = reg.coef_
        self.intercept_ = reg.intercept_
        self.n_features_in_ = X.shape[1]
        return self

    def predict(self, X):
        check_is_fitted(self, "model_")
        return self.model_.predict(np.asarray(X, dtype=float))
