# stock_analytics/splitting.py

from __future__ import annotations

from typing import Tuple

import pandas as pd

from .config import TRAIN_RANK_THRESHOLD


def percent_rank(
    df: pd.DataFrame,
    partition_col: str = "ticker",
    order_col: str = "date",
) -> pd.Series:
    """
    Fractional position of each row within its partition, ordered by `order_col`.

    rank = (position - 1) / (partition size - 1), with ties sharing the lowest
    position. A partition with a single row gets rank 0.
    """
    # global order keys first so text and date columns rank the same way
    order_key = df[order_col].rank(method="min")
    grouped = order_key.groupby(df[partition_col])
    position = grouped.rank(method="min")
    size = grouped.transform("size")
    rank = (position - 1) / (size - 1)
    return rank.where(size > 1, 0.0).astype(float)


def rank_split(
    df: pd.DataFrame,
    threshold: float = TRAIN_RANK_THRESHOLD,
    partition_col: str = "ticker",
    order_col: str = "date",
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split each ticker's history chronologically: rank <= threshold goes to train,
    the rest to test.

    Ranks are per ticker, so every ticker contributes its earliest ~70% to train
    and its latest ~30% to test even when tickers cover different date ranges.
    """
    rank = percent_rank(df, partition_col=partition_col, order_col=order_col)
    train = df[rank <= threshold].reset_index(drop=True)
    test = df[rank > threshold].reset_index(drop=True)
    return train, test
