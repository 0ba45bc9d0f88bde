# stock_analytics/encoders.py

"""
Turning mixed categorical / continuous columns into numeric feature matrices.

Each predictor column gets a role ("categorical" or "continuous") and the
role picks its encoder from ENCODER_REGISTRY:

  categorical -> text, then one-hot (unseen categories encode as all zeros)
  continuous  -> passed through unchanged

A "label ~ predictors" formula is only used to pick the columns; the roles
come from the column dtypes.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import FunctionTransformer, OneHotEncoder
from sklearn.utils.validation import check_is_fitted


# ---------------------------------------------------------------------
# Formula resolution
# ---------------------------------------------------------------------
def resolve_formula(formula: str, columns: Sequence[str]) -> Tuple[str, List[str]]:
    """
    Resolve "label ~ terms" against the available columns.

    Terms are joined with '+'; '.' means every column except the label and
    '- col' removes a column, e.g. "change ~ . - volume".
    Returns (label, predictors) with predictors in column order.
    """
    if formula.count("~") != 1:
        raise ValueError(f"Formula '{formula}' must have the form 'label ~ terms'.")

    lhs, rhs = (side.strip() for side in formula.split("~"))
    if not lhs or not rhs:
        raise ValueError(f"Formula '{formula}' must have the form 'label ~ terms'.")

    columns = list(columns)
    if lhs not in columns:
        raise KeyError(f"Formula label '{lhs}' not found. Got columns: {columns}")

    included: List[str] = []
    excluded: List[str] = []
    for raw_term in rhs.replace("-", "+-").split("+"):
        term = raw_term.strip()
        if not term:
            continue
        target = excluded if term.startswith("-") else included
        name = term.lstrip("-").strip()
        if name == ".":
            target.extend(c for c in columns if c != lhs)
        elif name in columns:
            target.append(name)
        else:
            raise KeyError(f"Formula term '{name}' not found. Got columns: {columns}")

    predictors = [c for c in columns if c in included and c not in excluded and c != lhs]
    if not predictors:
        raise ValueError(f"Formula '{formula}' leaves no predictor columns.")
    return lhs, predictors


# ---------------------------------------------------------------------
# String indexing (most frequent label -> 0)
# ---------------------------------------------------------------------
def frequency_order(values: pd.Series) -> List[str]:
    """Distinct values as text, most frequent first, ties alphabetical."""
    counts = values.astype(str).value_counts()
    return [label for label, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


class FrequencyIndexer(TransformerMixin, BaseEstimator):
    """
    Map each string column to a dense float index ordered by label frequency.

    handle_unknown="error" raises on a value not seen during fit,
    handle_unknown="keep" maps it to an extra index (number of labels).
    """

    def __init__(self, handle_unknown: str = "error"):
        self.handle_unknown = handle_unknown

    def fit(self, X, y=None):
        if self.handle_unknown not in ("error", "keep"):
            raise ValueError(
                f"handle_unknown must be 'error' or 'keep', got '{self.handle_unknown}'"
            )
        frame = pd.DataFrame(X)
        self.labels_ = [frequency_order(frame.iloc[:, i]) for i in range(frame.shape[1])]
        self.n_features_in_ = frame.shape[1]
        return self

    def transform(self, X):
        check_is_fitted(self, "labels_")
        frame = pd.DataFrame(X)
        out = np.empty(frame.shape, dtype=float)
        for i, labels in enumerate(self.labels_):
            mapping = {label: float(idx) for idx, label in enumerate(labels)}
            indexed = frame.iloc[:, i].astype(str).map(mapping)
            unseen = indexed.isna()
            if unseen.any():
                if self.handle_unknown == "error":
                    sample = frame.iloc[:, i][unseen].astype(str).unique()[:5].tolist()
                    raise ValueError(f"Unseen labels {sample} in column {i}.")
                indexed = indexed.fillna(float(len(labels)))
            out[:, i] = indexed.to_numpy(dtype=float)
        return out

    def get_feature_names_out(self, input_features=None):
        if input_features is None:
            input_features = [f"x{i}" for i in range(self.n_features_in_)]
        return np.asarray([f"indexed_{name}" for name in input_features], dtype=object)


# ---------------------------------------------------------------------
# Column-role encoders
# ---------------------------------------------------------------------
def as_text(X) -> pd.DataFrame:
    """Categorical values as strings (dates become YYYY-MM-DD)."""
    return pd.DataFrame(X).astype(str)


def make_categorical_encoder() -> Pipeline:
    return Pipeline([
        ("text", FunctionTransformer(as_text, feature_names_out="one-to-one")),
        ("onehot", OneHotEncoder(handle_unknown="ignore", sparse_output=False)),
    ])


def make_continuous_encoder() -> str:
    return "passthrough"


ENCODER_REGISTRY: Dict[str, Callable[[], object]] = {
    "categorical": make_categorical_encoder,
    "continuous": make_continuous_encoder,
}


def column_roles(df: pd.DataFrame, columns: Sequence[str]) -> Dict[str, str]:
    """Numeric columns are continuous, everything else (text, dates) categorical."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns {missing} not found. Got columns: {list(df.columns)}")
    return {
        col: "continuous" if pd.api.types.is_numeric_dtype(df[col]) else "categorical"
        for col in columns
    }


def build_encoder(roles: Dict[str, str]) -> ColumnTransformer:
    """One encoder per column, output columns in the order of `roles`."""
    transformers = []
    for col, role in roles.items():
        if role not in ENCODER_REGISTRY:
            raise ValueError(f"Unknown column role '{role}' for column '{col}'.")
        transformers.append((f"{role}_{col}", ENCODER_REGISTRY[role](), [col]))
    return ColumnTransformer(transformers, remainder="drop", sparse_threshold=0.0)
