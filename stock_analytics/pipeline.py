# stock_analytics/pipeline.py

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from .aggregates import show_averages, show_volatility
from .classifier import run_logistic_predictor
from .config import (
    AVERAGES_CSV_PATH,
    AVERAGES_PARQUET_PATH,
    CLASSIFIER_MODEL_DIR,
    DEFAULT_INPUT_PATH,
    DETAIL_PRINT_LINES,
    PARTITION_PRINT_LINES,
    REGRESSOR_MODEL_DIR,
    RESOURCES_DIR,
    VOLATILITY_CSV_PATH,
    VOLATILITY_PARQUET_PATH,
)
from .features import add_daily_return
from .loader import LEGACY_DATE_PARSER, DateParserConfig, load_prices
from .regressor import run_linear_regression
from .schemas import RunSummary


def _under(resources_dir: Path, default_path: Path) -> Path:
    """Re-root one of the configured output paths under `resources_dir`."""
    return Path(resources_dir) / default_path.relative_to(RESOURCES_DIR)


def run_pipeline(
    file_path: str | Path = DEFAULT_INPUT_PATH,
    resources_dir: str | Path = RESOURCES_DIR,
    parser: DateParserConfig = LEGACY_DATE_PARSER,
    save_as_csv: bool = True,
) -> RunSummary:
    """
    Load -> daily returns -> {averages, volatility, classifier, regressor}.

    All outputs are written under `resources_dir` (parquet/, csv/, tmp/).
    Any failure aborts the run; outputs already written stay on disk.
    """
    resources_dir = Path(resources_dir)
    print(f"[pipeline] Starting analysis of {file_path}")

    prices = load_prices(file_path, parser=parser)
    df = add_daily_return(prices)

    show_averages(
        df,
        print_lines=DETAIL_PRINT_LINES,
        save_as_csv=save_as_csv,
        parquet_path=_under(resources_dir, AVERAGES_PARQUET_PATH),
        csv_path=_under(resources_dir, AVERAGES_CSV_PATH),
    )
    show_volatility(
        df,
        save_as_csv=save_as_csv,
        parquet_path=_under(resources_dir, VOLATILITY_PARQUET_PATH),
        csv_path=_under(resources_dir, VOLATILITY_CSV_PATH),
    )

    summary = RunSummary(
        input_path=str(file_path),
        n_rows=len(df),
        n_tickers=int(df["ticker"].nunique()),
    )

    if df.empty:
        print("[pipeline] No complete rows left after loading, skipping model training")
        return summary

    clf = run_logistic_predictor(
        df,
        print_lines=PARTITION_PRINT_LINES,
        model_dir=_under(resources_dir, CLASSIFIER_MODEL_DIR),
    )
    summary.classifier_accuracy = clf.accuracy
    summary.classifier_params = clf.best_params

    reg = run_linear_regression(
        df,
        model_dir=_under(resources_dir, REGRESSOR_MODEL_DIR),
    )
    summary.regressor_metrics = reg.metrics
    summary.regressor_params = reg.best_params

    print("[pipeline] Done.")
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    """Usage: python -m stock_analytics [PRICE_FILE]"""
    args = sys.argv[1:] if argv is None else argv
    file_path = args[0] if args else DEFAULT_INPUT_PATH
    summary = run_pipeline(file_path)
    print(summary.model_dump_json(indent=2))
