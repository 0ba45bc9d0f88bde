# tests/conftest.py

"""
Shared fixtures: small deterministic price tables.

Every model test fits on these, so they are sized to give each ticker
enough history for the 70/30 chronological split and the inner
train/validation split to both see UP and DOWN days.
"""

import numpy as np
import pandas as pd
import pytest

from stock_analytics.features import add_daily_return


def make_prices(tickers=("AAPL", "MSFT", "TSLA"), n_days=40, seed=42) -> pd.DataFrame:
    rng = np.random.RandomState(seed)
    dates = pd.date_range("2021-01-04", periods=n_days, freq="B")

    frames = []
    for i, ticker in enumerate(tickers):
        base = 100.0 * (i + 1)
        opens = np.round(base + np.cumsum(rng.randn(n_days)), 2)
        closes = np.round(opens * (1 + rng.randn(n_days) * 0.01), 2)
        closes[::7] = opens[::7]  # a few UNCHANGED days
        frames.append(pd.DataFrame({
            "date": dates,
            "open": opens,
            "high": np.maximum(opens, closes) + 0.5,
            "low": np.minimum(opens, closes) - 0.5,
            "close": closes,
            "volume": rng.randint(1_000_000, 10_000_000, n_days),
            "ticker": ticker,
        }))
    return pd.concat(frames, ignore_index=True)


def write_price_csv(df: pd.DataFrame, path) -> None:
    out = df.copy()
    out["date"] = out["date"].dt.strftime("%Y-%m-%d")
    out.to_csv(path, index=False)


@pytest.fixture
def prices():
    """3 tickers x 40 business days of raw price records."""
    return make_prices()


@pytest.fixture
def derived(prices):
    """Same records with dailyReturn_%."""
    return add_daily_return(prices)


@pytest.fixture
def price_csv(tmp_path, prices):
    path = tmp_path / "stock_prices.csv"
    write_price_csv(prices, path)
    return path


@pytest.fixture
def aapl_three_rows():
    """(open, close) = (100, 110), (110, 100), (100, 100) on consecutive days."""
    return pd.DataFrame({
        "date": pd.to_datetime(["2021-01-04", "2021-01-05", "2021-01-06"]),
        "open": [100.0, 110.0, 100.0],
        "high": [111.0, 111.0, 101.0],
        "low": [99.0, 99.0, 99.0],
        "close": [110.0, 100.0, 100.0],
        "volume": [1000, 2000, 3000],
        "ticker": ["AAPL", "AAPL", "AAPL"],
    })
