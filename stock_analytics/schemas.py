# stock_analytics/schemas.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RegressionMetrics(BaseModel):
    """Error metrics on the held-out test partition."""
    mae: float
    rmse: float
    r2: float


class ModelMetadata(BaseModel):
    """
    Written as metadata.json next to each persisted model.
    """
    kind: str                                  # "classifier" or "regressor"
    best_params: Dict[str, Union[float, str]]  # winning grid combination
    validation_score: float                    # selection metric on the validation split
    feature_columns: List[str]
    target_column: str
    test_accuracy: Optional[float] = None      # classifier only
    test_metrics: Optional[RegressionMetrics] = None  # regressor only
    n_train: int
    n_test: int
    created_at: datetime = Field(default_factory=_utc_now)


class RunSummary(BaseModel):
    """
    Result of one end-to-end batch run.
    """
    input_path: str
    n_rows: int
    n_tickers: int
    classifier_accuracy: Optional[float] = None
    classifier_params: Optional[Dict[str, Union[float, str]]] = None
    regressor_metrics: Optional[RegressionMetrics] = None
    regressor_params: Optional[Dict[str, Union[float, str]]] = None
