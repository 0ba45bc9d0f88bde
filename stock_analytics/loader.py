# stock_analytics/loader.py

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from .config import DATE_FORMAT, REQUIRED_COLUMNS

PRICE_COLUMNS = ["open", "high", "low", "close"]

# Java-style pattern letters we understand, with strftime and lenient regex forms
_PATTERN_FIELDS = {
    "yyyy": ("year", "%Y", r"(\d{1,4})"),
    "MM": ("month", "%m", r"(\d{1,2})"),
    "dd": ("day", "%d", r"(\d{1,2})"),
}
_PATTERN_TOKEN = re.compile("|".join(_PATTERN_FIELDS))


@dataclass(frozen=True)
class DateParserConfig:
    """
    How the loader turns the textual 'date' column into calendar dates.

    policy = "legacy"    lenient parsing: 1-2 digit month/day are accepted,
                         out-of-range fields roll over (2020-02-30 -> 2020-03-01)
                         and anything after the date (e.g. a time) is ignored.
    policy = "corrected" strict parsing, the whole value must match the pattern.

    Either way a value that cannot be parsed is an error for the whole load.
    """
    pattern: str = DATE_FORMAT
    policy: str = "legacy"

    def __post_init__(self):
        if self.policy not in ("legacy", "corrected"):
            raise ValueError(
                f"Unknown date parser policy '{self.policy}'. "
                f"Expected 'legacy' or 'corrected'."
            )
        if not _PATTERN_TOKEN.search(self.pattern):
            raise ValueError(f"Unsupported date pattern '{self.pattern}'.")

    @property
    def strftime(self) -> str:
        return _PATTERN_TOKEN.sub(lambda m: _PATTERN_FIELDS[m.group(0)][1], self.pattern)

    def _lenient_regex(self) -> Tuple[re.Pattern, List[str]]:
        fields: List[str] = []
        parts: List[str] = []
        pos = 0
        for m in _PATTERN_TOKEN.finditer(self.pattern):
            parts.append(re.escape(self.pattern[pos:m.start()]))
            name, _, regex = _PATTERN_FIELDS[m.group(0)]
            fields.append(name)
            parts.append(regex)
            pos = m.end()
        parts.append(re.escape(self.pattern[pos:]))
        return re.compile(r"^\s*" + "".join(parts)), fields

    def parse(self, values: pd.Series) -> pd.Series:
        """Parse a Series of date strings into a datetime64 Series (midnight)."""
        if self.policy == "corrected":
            return pd.to_datetime(values, format=self.strftime, errors="raise")

        regex, fields = self._lenient_regex()

        def _parse_one(value) -> pd.Timestamp:
            m = regex.match(str(value))
            if m is None:
                raise ValueError(
                    f"Could not parse date '{value}' with pattern '{self.pattern}'."
                )
            parts = dict(zip(fields, (int(g) for g in m.groups())))
            year = parts.get("year", 1970)
            month = parts.get("month", 1)
            day = parts.get("day", 1)
            # Lenient: month 13 is January next year, day 0 is the last day before
            return (
                pd.Timestamp(year=year, month=1, day=1)
                + pd.DateOffset(months=month - 1)
                + pd.Timedelta(days=day - 1)
            )

        return pd.to_datetime(values.map(_parse_one))


LEGACY_DATE_PARSER = DateParserConfig()


def load_prices(
    file_path: str | Path,
    parser: DateParserConfig = LEGACY_DATE_PARSER,
) -> pd.DataFrame:
    """
    Load a price file into a DataFrame of price records.

    - rows with a missing value in ANY column are dropped (no imputation),
    - 'date' is parsed with the given parser config into calendar dates,
    - open/high/low/close become floats, volume numeric, ticker a string.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Price file not found at {file_path}.")

    # pandas raises EmptyDataError (a ValueError) on a zero-byte file
    df = pd.read_csv(file_path, dtype={"date": str, "ticker": str})

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(
            f"Expected columns {missing} not found in {file_path}. "
            f"Got columns: {list(df.columns)}"
        )

    n_raw = len(df)
    df = df.dropna(how="any").reset_index(drop=True)

    df["date"] = parser.parse(df["date"])
    df[PRICE_COLUMNS] = df[PRICE_COLUMNS].astype(float)
    df["volume"] = pd.to_numeric(df["volume"], errors="raise")
    df["ticker"] = df["ticker"].astype(str)

    print(
        f"[loader] Loaded {len(df)} rows from {file_path} "
        f"({n_raw - len(df)} dropped with missing fields)"
    )
    return df
