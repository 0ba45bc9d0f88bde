# stock_analytics/classifier.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score
from sklearn.pipeline import Pipeline

from .aggregates import show_table
from .config import (
    CLASSIFIER_FORMULA,
    CLASSIFIER_MODEL_DIR,
    CLASSIFIER_PARAM_GRID,
    CLASSIFIER_TRAIN_RATIO,
    DAILY_RETURN_COL,
    LABEL_COL,
    MAX_ITER,
    PARTITION_PRINT_LINES,
    SPLIT_SEED,
    TRAIN_RANK_THRESHOLD,
)
from .encoders import build_encoder, column_roles, frequency_order, resolve_formula
from .estimators import RegularizedLogisticRegression
from .schemas import ModelMetadata
from .splitting import rank_split
from .storage import save_model
from .tuning import train_validation_search

UP = "UP"
DOWN = "DOWN"
UNCHANGED = "UNCHANGED"

PREDICTION_COLUMNS = [
    "date", "open", "close", "volume", "ticker", DAILY_RETURN_COL,
    LABEL_COL, "label", "predictedChange", "prediction", "probability",
]


@dataclass
class ClassifierResult:
    accuracy: float
    best_params: Dict[str, float]
    validation_accuracy: float
    predictors: List[str]
    predictions: pd.DataFrame
    model: Pipeline
    model_dir: Path
    n_train: int
    n_test: int


def label_direction(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add 'change' from the sign of dailyReturn_%:
      > 0 -> UP, < 0 -> DOWN, == 0 -> UNCHANGED.
    A missing return leaves the label missing.
    """
    df = df.copy()
    ret = df[DAILY_RETURN_COL]
    change = pd.Series(None, index=df.index, dtype=object)
    change[ret > 0] = UP
    change[ret < 0] = DOWN
    change[ret == 0] = UNCHANGED
    df[LABEL_COL] = change
    return df


def build_classifier_pipeline(
    train: pd.DataFrame,
    formula: str = CLASSIFIER_FORMULA,
    max_iter: int = MAX_ITER,
) -> Tuple[Pipeline, str, List[str]]:
    """
    Two-stage pipeline: formula encoder -> multinomial logistic regression.

    Returns (pipeline, label column, predictor columns).
    """
    label, predictors = resolve_formula(formula, train.columns)
    encoder = build_encoder(column_roles(train, predictors))
    pipeline = Pipeline([
        ("formula", encoder),
        ("classifier", RegularizedLogisticRegression(max_iter=max_iter)),
    ])
    return pipeline, label, predictors


def run_logistic_predictor(
    df: pd.DataFrame,
    print_lines: int = PARTITION_PRINT_LINES,
    formula: str = CLASSIFIER_FORMULA,
    param_grid: Dict[str, Sequence[float]] = CLASSIFIER_PARAM_GRID,
    train_ratio: float = CLASSIFIER_TRAIN_RATIO,
    rank_threshold: float = TRAIN_RANK_THRESHOLD,
    model_dir: str | Path = CLASSIFIER_MODEL_DIR,
    seed: int = SPLIT_SEED,
) -> ClassifierResult:
    """
    Predict UP / DOWN / UNCHANGED for each record, report test accuracy and
    save the best logistic regression pipeline to `model_dir`.

    Steps: label -> per-ticker chronological split -> grid search on the
    train partition -> evaluate on the test partition -> persist.
    """
    labeled = label_direction(df)
    unlabeled = labeled[LABEL_COL].isna()
    if unlabeled.any():
        print(f"[classifier] Dropping {int(unlabeled.sum())} rows without a direction label")
        labeled = labeled[~unlabeled].reset_index(drop=True)

    train, test = rank_split(labeled, threshold=rank_threshold)
    if train.empty or test.empty:
        raise ValueError(
            f"Chronological split left nothing to fit or evaluate "
            f"(train={len(train)}, test={len(test)})."
        )
    print(f"[classifier] Train rows: {len(train)}, test rows: {len(test)}")

    show_table("Train partition:", train.sort_values("date", kind="stable"), print_lines)
    show_table("Test partition:", test.sort_values("date", kind="stable"), print_lines)

    pipeline, label, predictors = build_classifier_pipeline(train, formula=formula)

    search = train_validation_search(
        pipeline,
        param_grid,
        train[predictors],
        train[label],
        train_ratio=train_ratio,
        scoring="accuracy",
        step_name="classifier",
        seed=seed,
    )
    best: Pipeline = search.best_estimator_

    predicted = best.predict(test[predictors])
    probabilities = best.predict_proba(test[predictors])
    label_index = {name: idx for idx, name in enumerate(frequency_order(train[label]))}

    predictions = test.copy()
    predictions["label"] = predictions[label].map(label_index).astype(float)
    predictions["predictedChange"] = predicted
    predictions["prediction"] = pd.Series(predicted).map(label_index).astype(float).to_numpy()
    predictions["probability"] = [np.round(p, 4).tolist() for p in probabilities]

    shown = [c for c in PREDICTION_COLUMNS if c in predictions.columns]
    show_table(
        "Prediction and how it compares to the real data:",
        predictions[shown].sort_values("date", kind="stable"),
        print_lines,
    )

    accuracy = float(accuracy_score(test[label], predicted))
    classifier: RegularizedLogisticRegression = best.named_steps["classifier"]
    best_params = {k.split("__", 1)[1]: v for k, v in search.best_params_.items()}
    print(f"Logistic Regression model accuracy on the test partition: {accuracy}")
    print(f"[classifier] Best params: {best_params}, solver iterations: {classifier.n_iter_}\n")

    metadata = ModelMetadata(
        kind="classifier",
        best_params=best_params,
        validation_score=float(search.best_score_),
        feature_columns=predictors,
        target_column=label,
        test_accuracy=accuracy,
        n_train=len(train),
        n_test=len(test),
    )
    model_dir = save_model(best, metadata, model_dir)

    return ClassifierResult(
        accuracy=accuracy,
        best_params=best_params,
        validation_accuracy=float(search.best_score_),
        predictors=predictors,
        predictions=predictions,
        model=best,
        model_dir=model_dir,
        n_train=len(train),
        n_test=len(test),
    )
