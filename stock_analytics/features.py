# stock_analytics/features.py

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import numpy as np
import pandas as pd

from .config import DAILY_RETURN_COL, TRADED_VALUE_COL


def round_half_up(values: pd.Series, decimals: int) -> pd.Series:
    """
    Round half away from zero on the shortest decimal form of each float.

    numpy/pandas round half to even (2.5 -> 2), which is not how the
    reported figures are rounded, so go through Decimal instead.
    Missing and infinite values pass through unchanged.
    """
    quantum = Decimal(1).scaleb(-decimals)

    def _round(x: float) -> float:
        if np.isnan(x) or np.isinf(x):
            return x
        return float(Decimal(repr(x)).quantize(quantum, rounding=ROUND_HALF_UP))

    return values.astype(float).map(_round).astype(float)


def add_daily_return(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add 'dailyReturn_%' = round((close - open) / open * 100, 4).

    An open price of exactly 0 yields a missing return instead of +/-inf.
    """
    df = df.copy()
    open_ = df["open"].where(df["open"] != 0)
    df[DAILY_RETURN_COL] = round_half_up((df["close"] - open_) / open_ * 100, 4)
    return df


def add_traded_value(df: pd.DataFrame) -> pd.DataFrame:
    """Add traded value per record: volume * close."""
    df = df.copy()
    df[TRADED_VALUE_COL] = df["volume"].astype(float) * df["close"]
    return df
