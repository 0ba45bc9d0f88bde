# stock_analytics/storage.py

"""
Writing aggregate views and model artifacts to disk.

Every write overwrites whatever is at the destination (file or directory),
so re-running the job is idempotent. There is no append mode.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Tuple

import joblib
import pandas as pd

from .config import METADATA_FILENAME, MODEL_FILENAME
from .schemas import ModelMetadata


def _clear(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()
    path.parent.mkdir(parents=True, exist_ok=True)


def write_parquet(df: pd.DataFrame, path: str | Path) -> Path:
    path = Path(path)
    _clear(path)
    df.to_parquet(path, index=False)
    print(f"[storage] Saved {len(df)} rows to {path}")
    return path


def write_csv(df: pd.DataFrame, path: str | Path) -> Path:
    path = Path(path)
    _clear(path)
    df.to_csv(path, index=False, header=True)
    print(f"[storage] Saved {len(df)} rows to {path}")
    return path


def read_parquet(path: str | Path) -> pd.DataFrame:
    return pd.read_parquet(Path(path))


def read_csv(path: str | Path) -> pd.DataFrame:
    return pd.read_csv(Path(path))


def save_model(model: Any, metadata: ModelMetadata, model_dir: str | Path) -> Path:
    """
    Persist a fitted pipeline into its own directory:

      <model_dir>/model.joblib   - the fitted estimator
      <model_dir>/metadata.json  - ModelMetadata (params, scores, metrics)
    """
    model_dir = Path(model_dir)
    _clear(model_dir)
    model_dir.mkdir(parents=True)

    model_path = model_dir / MODEL_FILENAME
    metadata_path = model_dir / METADATA_FILENAME
    joblib.dump(model, model_path)
    metadata_path.write_text(metadata.model_dump_json(indent=2))

    print(f"[storage] Saved {metadata.kind} model to: {model_dir}")
    return model_dir


def load_model(model_dir: str | Path) -> Tuple[Any, ModelMetadata]:
    model_dir = Path(model_dir)
    model_path = model_dir / MODEL_FILENAME
    metadata_path = model_dir / METADATA_FILENAME

    if not model_path.exists() or not metadata_path.exists():
        raise FileNotFoundError(
            f"Model artifact not found in {model_dir}. "
            f"Expected: {model_path} and {metadata_path}."
        )

    model = joblib.load(model_path)
    metadata = ModelMetadata.model_validate_json(metadata_path.read_text())
    return model, metadata
