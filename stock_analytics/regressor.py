# stock_analytics/regressor.py

"""
Linear regression on the close price.

The feature vector contains 'close' itself, so the target leaks into the
predictors and the reported test metrics are optimistic. This is kept as is
until it is decided what the model is meant to predict.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from .aggregates import show_table
from .config import (
    DEFAULT_PRINT_LINES,
    REGRESSOR_FEATURE_COLUMNS,
    REGRESSOR_MODEL_DIR,
    REGRESSOR_PARAM_GRID,
    REGRESSOR_TARGET_COL,
    REGRESSOR_TRAIN_RATIO,
    SPLIT_SEED,
    TRAIN_RANK_THRESHOLD,
)
from .encoders import FrequencyIndexer
from .estimators import RegularizedLinearRegression
from .schemas import ModelMetadata, RegressionMetrics
from .splitting import rank_split
from .storage import save_model
from .tuning import train_validation_search


@dataclass
class RegressorResult:
    metrics: RegressionMetrics
    best_params: Dict[str, float]
    validation_rmse: float
    predictions: pd.DataFrame
    model: Pipeline
    model_dir: Path
    n_train: int
    n_test: int


def prepare_regression_frame(df: pd.DataFrame) -> pd.DataFrame:
    """volume -> float, date -> 'YYYY-MM-DD' text."""
    df = df.copy()
    df["volume"] = df["volume"].astype(float)
    if pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")
    df["date"] = df["date"].astype(str)
    return df


def index_dates(df: pd.DataFrame) -> Tuple[pd.DataFrame, FrequencyIndexer]:
    """
    Add 'indexedDate' fitted on the WHOLE frame, so every date (train or
    test) has an index before the chronological split.
    """
    indexer = FrequencyIndexer().fit(df[["date"]])
    df = df.copy()
    df["indexedDate"] = indexer.transform(df[["date"]])[:, 0]
    return df, indexer


def _date_one_hot(n_dates: int) -> OneHotEncoder:
    return OneHotEncoder(
        categories=[np.arange(n_dates, dtype=float)],
        handle_unknown="ignore",
        sparse_output=False,
    )


# Derived feature name -> source column
DERIVED_SOURCES: Dict[str, str] = {
    "encodedIndexedDate": "indexedDate",
    "indexedTicker": "ticker",
}


def _derived_encoder(name: str, n_dates: int):
    if name == "encodedIndexedDate":
        return _date_one_hot(n_dates)
    return FrequencyIndexer(handle_unknown="keep")


def build_feature_assembler(
    df: pd.DataFrame,
    feature_columns: Sequence[str],
    n_dates: int,
) -> ColumnTransformer:
    """
    Assemble the feature vector in `feature_columns` order. Derived names are
    encoded from their source column, anything else must be a numeric column.
    """
    transformers = []
    for name in feature_columns:
        if name in DERIVED_SOURCES:
            source, encoder = DERIVED_SOURCES[name], _derived_encoder(name, n_dates)
        else:
            source, encoder = name, "passthrough"
        if source not in df.columns:
            raise KeyError(
                f"Feature '{name}' needs column '{source}'. Got columns: {list(df.columns)}"
            )
        transformers.append((name, encoder, [source]))
    return ColumnTransformer(transformers, remainder="drop", sparse_threshold=0.0)


def _source_columns(feature_columns: Sequence[str]) -> List[str]:
    return [DERIVED_SOURCES.get(name, name) for name in feature_columns]


def regression_metrics(y_true, y_pred) -> RegressionMetrics:
    return RegressionMetrics(
        mae=float(mean_absolute_error(y_true, y_pred)),
        rmse=float(np.sqrt(mean_squared_error(y_true, y_pred))),
        r2=float(r2_score(y_true, y_pred)),
    )


def run_linear_regression(
    df: pd.DataFrame,
    print_lines: int = DEFAULT_PRINT_LINES,
    feature_columns: Sequence[str] = REGRESSOR_FEATURE_COLUMNS,
    target_col: str = REGRESSOR_TARGET_COL,
    param_grid: Dict[str, Sequence[float]] = REGRESSOR_PARAM_GRID,
    train_ratio: float = REGRESSOR_TRAIN_RATIO,
    rank_threshold: float = TRAIN_RANK_THRESHOLD,
    model_dir: str | Path = REGRESSOR_MODEL_DIR,
    seed: int = SPLIT_SEED,
) -> RegressorResult:
    """
    Fit a linear regression of the close price, report MAE / RMSE / R^2 on
    the test partition and save the best pipeline to `model_dir`.
    """
    print("Linear Regression Model:")

    frame = prepare_regression_frame(df)
    print(frame.dtypes.to_string())
    print(frame.describe(include="all").to_string())
    print()

    if target_col not in frame.columns:
        raise KeyError(f"Target column '{target_col}' not found. Got columns: {list(frame.columns)}")

    frame, date_indexer = index_dates(frame)
    n_dates = len(date_indexer.labels_[0])

    assembler = build_feature_assembler(frame, feature_columns, n_dates)
    sources = _source_columns(feature_columns)

    incomplete = frame[sources + [target_col]].isna().any(axis=1)
    if incomplete.any():
        print(f"[regressor] Dropping {int(incomplete.sum())} rows with missing feature values")
        frame = frame[~incomplete].reset_index(drop=True)

    train, test = rank_split(frame, threshold=rank_threshold)
    if train.empty or test.empty:
        raise ValueError(
            f"Chronological split left nothing to fit or evaluate "
            f"(train={len(train)}, test={len(test)})."
        )
    print(f"[regressor] Train rows: {len(train)}, test rows: {len(test)}")

    pipeline = Pipeline([
        ("features", assembler),
        ("regressor", RegularizedLinearRegression()),
    ])

    search = train_validation_search(
        pipeline,
        param_grid,
        train,
        train[target_col],
        train_ratio=train_ratio,
        scoring="neg_root_mean_squared_error",
        step_name="regressor",
        seed=seed,
    )
    best: Pipeline = search.best_estimator_

    predictions = test.copy()
    predictions["prediction"] = best.predict(test)
    show_table("Predicted close prices:", predictions, print_lines)

    metrics = regression_metrics(predictions[target_col], predictions["prediction"])
    print("Test data metrics:")
    print(f"MAE: {metrics.mae}")
    print(f"RMSE: {metrics.rmse}")
    print(f"R Squared: {metrics.r2}\n")

    best_params = {k.split("__", 1)[1]: v for k, v in search.best_params_.items()}
    metadata = ModelMetadata(
        kind="regressor",
        best_params=best_params,
        validation_score=float(search.best_score_),
        feature_columns=list(feature_columns),
        target_column=target_col,
        test_metrics=metrics,
        n_train=len(train),
        n_test=len(test),
    )
    model_dir = save_model(best, metadata, model_dir)

    return RegressorResult(
        metrics=metrics,
        best_params=best_params,
        validation_rmse=float(-search.best_score_),
        predictions=predictions,
        model=best,
        model_dir=model_dir,
        n_train=len(train),
        n_test=len(test),
    )
