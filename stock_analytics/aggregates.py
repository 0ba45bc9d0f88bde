# stock_analytics/aggregates.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from .config import (
    AVERAGES_CSV_PATH,
    AVERAGES_PARQUET_PATH,
    DAILY_RETURN_COL,
    DEFAULT_PRINT_LINES,
    DETAIL_PRINT_LINES,
    TRADED_VALUE_COL,
    TRADING_DAYS_PER_YEAR,
    VOLATILITY_CSV_PATH,
    VOLATILITY_PARQUET_PATH,
)
from .features import add_traded_value, round_half_up
from .storage import write_csv, write_parquet


@dataclass
class AveragesReport:
    daily_returns: pd.DataFrame
    avg_return_by_ticker: pd.DataFrame
    avg_return_by_date: pd.DataFrame
    most_traded_by_day: pd.DataFrame
    most_traded_on_average: pd.DataFrame


def show_table(title: str, df: pd.DataFrame, print_lines: int = DEFAULT_PRINT_LINES) -> None:
    """Print a heading and the first `print_lines` rows of a view."""
    print(title)
    print(df.head(print_lines).to_string(index=False))
    print()


# ---------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------
def daily_returns_by_date(df: pd.DataFrame) -> pd.DataFrame:
    """Every record's daily return, ordered by date."""
    return (
        df.sort_values("date", kind="stable")[["date", "ticker", DAILY_RETURN_COL]]
        .reset_index(drop=True)
    )


def average_return_by_ticker(df: pd.DataFrame) -> pd.DataFrame:
    """ticker -> round(avg(dailyReturn_%), 2), in first-seen ticker order."""
    avg = df.groupby("ticker", sort=False)[DAILY_RETURN_COL].mean()
    return pd.DataFrame({
        "ticker": avg.index.astype(str),
        "avgDailyReturn_%": round_half_up(avg, 2).values,
    })


def average_return_by_date(df: pd.DataFrame) -> pd.DataFrame:
    """date -> round(avg(dailyReturn_%), 2) across all tickers, date ascending."""
    avg = df.groupby("date", sort=True)[DAILY_RETURN_COL].mean()
    return pd.DataFrame({
        "date": avg.index,
        "average_return": round_half_up(avg, 2).values,
    })


def most_traded_by_day(df: pd.DataFrame) -> pd.DataFrame:
    """Each record with its traded value (volume * close), largest first."""
    return (
        add_traded_value(df)
        .sort_values(TRADED_VALUE_COL, ascending=False, kind="stable")
        .reset_index(drop=True)
    )


def most_traded_on_average(df: pd.DataFrame) -> pd.DataFrame:
    """ticker -> total and average traded value, ordered by average descending."""
    traded = add_traded_value(df)
    out = (
        traded.groupby("ticker")
        .agg(
            sumFrequency=(TRADED_VALUE_COL, "sum"),
            avgFrequency=(TRADED_VALUE_COL, "mean"),
        )
        .reset_index()
    )
    return out.sort_values("avgFrequency", ascending=False, kind="stable").reset_index(drop=True)


def volatility(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-ticker volatility of daily returns, highest annualized volatility first.

    Volatility            = round(stddev(dailyReturn_%), 2)   (sample stddev)
    Annualized_Volatility = round(stddev * sqrt(252), 2)

    A ticker with a single record has no sample stddev and sorts last.
    """
    std = df.groupby("ticker")[DAILY_RETURN_COL].std(ddof=1)
    out = pd.DataFrame({
        "ticker": std.index.astype(str),
        "Volatility": round_half_up(std, 2).values,
        "Annualized_Volatility": round_half_up(
            std * np.sqrt(TRADING_DAYS_PER_YEAR), 2
        ).values,
    })
    return (
        out.sort_values("Annualized_Volatility", ascending=False, kind="stable")
        .reset_index(drop=True)
    )


# ---------------------------------------------------------------------
# Console reports
# ---------------------------------------------------------------------
def show_averages(
    df: pd.DataFrame,
    print_lines: int = DEFAULT_PRINT_LINES,
    save_as_parquet: bool = True,
    save_as_csv: bool = False,
    parquet_path: str | Path = AVERAGES_PARQUET_PATH,
    csv_path: str | Path = AVERAGES_CSV_PATH,
) -> AveragesReport:
    """
    Print the return and traded-value views.

    The per-date average return view is optionally persisted
    (parquet and/or CSV, overwrite, with header).
    """
    report = AveragesReport(
        daily_returns=daily_returns_by_date(df),
        avg_return_by_ticker=average_return_by_ticker(df),
        avg_return_by_date=average_return_by_date(df),
        most_traded_by_day=most_traded_by_day(df),
        most_traded_on_average=most_traded_on_average(df),
    )

    show_table("Daily returns of all stocks by date:", report.daily_returns, DETAIL_PRINT_LINES)
    show_table("Average daily return of every stock:", report.avg_return_by_ticker, print_lines)
    show_table("Average daily return of all stocks by date:", report.avg_return_by_date, print_lines)

    if save_as_parquet:
        write_parquet(report.avg_return_by_date, parquet_path)
    if save_as_csv:
        write_csv(report.avg_return_by_date, csv_path)

    show_table("Most frequently traded stocks on a given day:", report.most_traded_by_day, print_lines)
    show_table("Most frequently traded stocks on average:", report.most_traded_on_average, print_lines)

    return report


def show_volatility(
    df: pd.DataFrame,
    print_lines: int = DEFAULT_PRINT_LINES,
    save_as_parquet: bool = True,
    save_as_csv: bool = False,
    parquet_path: str | Path = VOLATILITY_PARQUET_PATH,
    csv_path: str | Path = VOLATILITY_CSV_PATH,
) -> pd.DataFrame:
    """Print (and optionally persist) stocks ordered by annualized volatility, %."""
    vol = volatility(df)
    show_table("Stocks ordered by annualized volatility, %:", vol, print_lines)

    if save_as_parquet:
        write_parquet(vol, parquet_path)
    if save_as_csv:
        write_csv(vol, csv_path)

    return vol
