"""Turning raw dataset cells into numbers.

`parse_numeric` is the one place that decides what counts as a number. Every
scoring method and every numeric filter reads its values through it.
"""

from __future__ import annotations

import math
import re
from typing import Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

Rows = Union[pd.DataFrame, Sequence[Mapping[str, Optional[str]]]]

_WHITESPACE = re.compile(r"[\s\u00a0\u202f]+")
_THOUSANDS_COMMA = re.compile(r"(?<=\d),(?=\d{3}(?:\D|$))")
_NON_NUMERIC = re.compile(r"[^0-9+\-.eE]")


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NA or value is pd.NaT


def parse_numeric(raw) -> Optional[float]:
    """Parse a locale-formatted cell into a float.

    Args:
        raw: The cell content. Strings are normalised; numbers pass through.

    Returns:
        float | None: The parsed number, or None when the cell is missing, empty
        or does not hold a number.
    """
    if _is_missing(raw) or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, np.integer, np.floating)):
        number = float(raw)
        return number if math.isfinite(number) else None

    text = _WHITESPACE.sub("", str(raw))
    if not text:
        return None
    text = _THOUSANDS_COMMA.sub("", text)
    text = text.replace(",", ".", 1)
    cleaned = _NON_NUMERIC.sub("", text)
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def rows_to_frame(rows: Rows) -> pd.DataFrame:
    """Return the rows as an object-typed DataFrame, keeping their order."""
    if isinstance(rows, pd.DataFrame):
        return rows
    records = list(rows)
    # from_records drops rows when no record carries any key
    return pd.DataFrame(records, index=pd.RangeIndex(len(records))).astype(object)


def extract_raw_column(rows: Rows, column_key: str) -> pd.Series:
    """Raw cell values of one column, None where the row lacks the key."""
    frame = rows_to_frame(rows)
    if column_key not in frame.columns:
        return pd.Series([None] * len(frame), index=frame.index, dtype=object, name=column_key)
    values = [None if _is_missing(v) else v for v in frame[column_key].tolist()]
    return pd.Series(values, index=frame.index, dtype=object, name=column_key)


def _parse_series(raw: pd.Series) -> pd.Series:
    return pd.Series(
        [parse_numeric(v) for v in raw.tolist()],
        index=raw.index,
        dtype=float,
        name=raw.name,
    )


def extract_column(rows: Rows, column_key: str) -> pd.Series:
    """Numeric values of one column, NaN where the cell is not a number."""
    return _parse_series(extract_raw_column(rows, column_key))


class ColumnCache:
    """Per-evaluation memo of extracted columns.

    A column referenced by several steps is read and parsed once. Create one
    cache per evaluation and let it go out of scope afterwards.
    """

    def __init__(self, rows: Rows):
        self.frame = rows_to_frame(rows)
        self._raw: Dict[str, pd.Series] = {}
        self._numeric: Dict[str, pd.Series] = {}

    def __len__(self):
        return len(self.frame)

    @property
    def index(self) -> pd.Index:
        return self.frame.index

    def raw(self, column_key: str) -> pd.Series:
        if column_key not in self._raw:
            self._raw[column_key] = extract_raw_column(self.frame, column_key)
        return self._raw[column_key]

    def numeric(self, column_key: str) -> pd.Series:
        if column_key not in self._numeric:
            self._numeric[column_key] = _parse_series(self.raw(column_key))
        return self._numeric[column_key]

    def cached_columns(self):
        return sorted(set(self._raw) | set(self._numeric))


__all__ = [
    "ColumnCache",
    "Rows",
    "extract_column",
    "extract_raw_column",
    "parse_numeric",
    "rows_to_frame",
]
