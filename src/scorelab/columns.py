from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import BOOLEAN_DATA_TYPES, NUMERIC_DATA_TYPES


def _finite_or_none(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class ColumnDescriptor:
    """Describes one dataset column.

    Attributes:
        key: Stable identifier of the column in every row.
        data_type: Declared type ("numeric", "percent", "ratio", "currency", "text", "boolean").
        average: Precomputed column average, if the dataset came with one.
        median: Precomputed column median, if the dataset came with one.
        description: Free text explaining what the column holds.
        label: Display label. Defaults to the key.
    """

    key: str
    data_type: str = "numeric"
    average: Optional[float] = None
    median: Optional[float] = None
    description: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("ColumnDescriptor.key must be a non-empty string.")
        object.__setattr__(self, "average", _finite_or_none(self.average))
        object.__setattr__(self, "median", _finite_or_none(self.median))

    @property
    def display_label(self) -> str:
        return self.label or self.key

    @property
    def is_numeric(self) -> bool:
        return self.data_type in NUMERIC_DATA_TYPES

    @property
    def is_boolean(self) -> bool:
        return self.data_type in BOOLEAN_DATA_TYPES

    def baseline(self) -> float:
        """Average, else median, else 0."""
        if self.average is not None:
            return self.average
        if self.median is not None:
            return self.median
        return 0.0


def is_numeric_column(column: Optional[ColumnDescriptor]) -> bool:
    return column is not None and column.is_numeric


def index_columns(columns: Iterable[ColumnDescriptor]) -> dict:
    """Map column keys to descriptors, rejecting duplicate keys."""
    indexed = {}
    for column in columns:
        if column.key in indexed:
            raise ValueError(f"Duplicate column key '{column.key}'.")
        indexed[column.key] = column
    return indexed
