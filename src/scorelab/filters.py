"""Row filters.

A filter compares one column against a value with an operator allowed for the
column's data type. `apply_filters` keeps the rows that satisfy every filter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .columns import ColumnDescriptor
from .config import BOOLEAN_DATA_TYPES, NUMERIC_DATA_TYPES
from .configs import is_finite_number
from .exceptions import ConfigurationError
from .extraction import Rows, extract_column, extract_raw_column, parse_numeric, rows_to_frame

logger = logging.getLogger(__name__)

NUMERIC_OPERATORS = ("range", "greaterThan", "lessThan")
TEXT_OPERATORS = ("equals", "contains")
BOOLEAN_OPERATORS = ("equals",)

OPERATOR_LABELS = {
    "range": "Within range",
    "greaterThan": "Greater than",
    "lessThan": "Less than",
    "equals": "Exact match",
    "contains": "Contains text",
}

FilterValue = Union[str, float, bool, Tuple[float, float]]


def available_operators(data_type: str) -> Tuple[str, ...]:
    """Operators a filter on a column of `data_type` may use.

    Types that are neither numeric nor boolean take the text operators.
    """
    if data_type in NUMERIC_DATA_TYPES:
        return NUMERIC_OPERATORS
    if data_type in BOOLEAN_DATA_TYPES:
        return BOOLEAN_OPERATORS
    return TEXT_OPERATORS


def describe_operator(operator: str) -> str:
    return OPERATOR_LABELS.get(operator, "Custom")


@dataclass(frozen=True)
class FilterDefinition:
    column: ColumnDescriptor
    operator: str
    value: FilterValue

    def describe(self) -> str:
        if self.operator == "range":
            lower, upper = _range_bounds(self.value)
            return f"{self.column.display_label} between {lower:g} and {upper:g}"
        return f"{self.column.display_label} {describe_operator(self.operator).lower()} {self.value}"


def _range_bounds(value) -> Tuple[float, float]:
    lower, upper = (parse_numeric(v) for v in value)
    return min(lower, upper), max(lower, upper)


def validate_filter(definition: FilterDefinition) -> FilterDefinition:
    """Check operator and value against the column type.

    Returns the filter with its value normalised (numbers parsed, range bounds
    sorted, text trimmed).

    Raises:
        ConfigurationError: The filter cannot be applied.
    """
    column = definition.column
    allowed = available_operators(column.data_type)
    if definition.operator not in allowed:
        raise ConfigurationError(
            f"Operator '{definition.operator}' is not available for {column.data_type} column "
            f"'{column.key}'. Available operators: {list(allowed)}"
        )

    value = definition.value
    if definition.operator == "range":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ConfigurationError("A range filter needs a lower and an upper bound.")
        bounds = [parse_numeric(v) for v in value]
        if not all(is_finite_number(b) for b in bounds):
            raise ConfigurationError("Numeric filters require a valid number for both bounds.")
        value = (min(bounds), max(bounds))
    elif definition.operator in ("greaterThan", "lessThan"):
        number = parse_numeric(value)
        if not is_finite_number(number):
            raise ConfigurationError("Numeric filters require a valid number.")
        value = number
    elif column.data_type in BOOLEAN_DATA_TYPES:
        text = str(value).strip().lower()
        if text not in ("true", "false"):
            raise ConfigurationError("Boolean filters match either true or false.")
        value = text
    else:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ConfigurationError("Provide filter values before saving.")
        value = text

    return FilterDefinition(column=column, operator=definition.operator, value=value)


def _single_mask(frame: pd.DataFrame, definition: FilterDefinition) -> np.ndarray:
    key = definition.column.key
    if definition.operator in NUMERIC_OPERATORS:
        numbers = extract_column(frame, key).to_numpy(dtype=float, na_value=np.nan)
        present = np.isfinite(numbers)
        with np.errstate(invalid="ignore"):
            if definition.operator == "range":
                lower, upper = _range_bounds(definition.value)
                hits = (numbers >= lower) & (numbers <= upper)
            elif definition.operator == "greaterThan":
                hits = numbers > parse_numeric(definition.value)
            else:
                hits = numbers < parse_numeric(definition.value)
        return present & hits

    raw = extract_raw_column(frame, key).tolist()
    needle = str(definition.value).strip().lower()
    texts = [None if v is None else str(v).strip().lower() for v in raw]
    if definition.operator == "contains":
        return np.array([t is not None and needle in t for t in texts], dtype=bool)
    return np.array([t is not None and t == needle for t in texts], dtype=bool)


def filter_mask(rows: Rows, filters: Sequence[FilterDefinition]) -> pd.Series:
    """Boolean Series, True for rows that satisfy every filter."""
    frame = rows_to_frame(rows)
    mask = np.ones(len(frame), dtype=bool)
    for definition in filters:
        checked = validate_filter(definition)
        mask &= _single_mask(frame, checked)
    return pd.Series(mask, index=frame.index, dtype=bool)


def apply_filters(rows: Rows, filters: Sequence[FilterDefinition]) -> Union[pd.DataFrame, List]:
    """Rows satisfying every filter, in their original order.

    A DataFrame input gives a DataFrame back; a sequence of rows gives a list of
    the same row objects.
    """
    filters = list(filters)
    if isinstance(rows, pd.DataFrame):
        if not filters:
            return rows
        return rows[filter_mask(rows, filters).to_numpy()]

    records = list(rows)
    if not filters:
        return records
    mask = filter_mask(records, filters).to_numpy()
    kept = [row for row, keep in zip(records, mask) if keep]
    logger.debug(f"{len(filters)} filter(s) kept {len(kept)} of {len(records)} row(s)")
    return kept
