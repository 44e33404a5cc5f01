import math

import pandas as pd
import pytest

from scorelab.extraction import (
    ColumnCache,
    extract_column,
    extract_raw_column,
    parse_numeric,
    rows_to_frame,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42.0),
        ("  -3.5 ", -3.5),
        ("1,234", 1234.0),
        ("1,234,567.5", 1234567.5),
        ("1,5", 1.5),
        ("12\u00a0345", 12345.0),
        ("12\u202f345", 12345.0),
        ("12 345,5", 12345.5),
        ("45%", 45.0),
        ("$1,200", 1200.0),
        ("1e3", 1000.0),
        ("+7", 7.0),
    ],
)
def test_parse_numeric_accepts_locale_formatted_numbers(raw, expected):
    assert parse_numeric(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "n/a", "abc", "-", ".", "e", "1.2.3"])
def test_parse_numeric_rejects_non_numbers(raw):
    assert parse_numeric(raw) is None


def test_parse_numeric_passes_numbers_through():
    assert parse_numeric(3) == 3.0
    assert parse_numeric(2.5) == 2.5
    assert parse_numeric(float("nan")) is None
    assert parse_numeric(True) is None


def test_parse_numeric_rejects_infinite_values():
    assert parse_numeric(float("inf")) is None
    assert parse_numeric(float("-inf")) is None
    assert parse_numeric("1e999") is None


def test_parse_numeric_is_deterministic():
    assert parse_numeric("1,234") == parse_numeric("1,234")


def test_extract_column_preserves_row_order_and_missing_keys(rows):
    values = extract_column(rows, "revenue")
    assert len(values) == len(rows)
    assert values.iloc[:5].tolist() == [1.0, 2.0, 3.0, 4.0, 100.0]
    assert math.isnan(values.iloc[5])


def test_extract_raw_column_keeps_text(rows):
    raw = extract_raw_column(rows, "active")
    assert raw.tolist() == ["true", "false", "TRUE", "", None, "yes"]


def test_extract_unknown_column_is_all_missing(rows):
    assert extract_raw_column(rows, "missing").tolist() == [None] * len(rows)
    assert extract_column(rows, "missing").isna().all()


def test_rows_to_frame_keeps_dataframe_index():
    df = pd.DataFrame({"a": ["1", "2"]}, index=[10, 20])
    assert rows_to_frame(df) is df
    assert extract_column(df, "a").index.tolist() == [10, 20]


def test_rows_to_frame_handles_no_rows():
    assert len(rows_to_frame([])) == 0
    assert extract_column([], "a").tolist() == []


def test_rows_without_any_key_keep_one_entry_per_row():
    rows = [{}, {}, {}]
    assert len(rows_to_frame(rows)) == 3
    assert extract_raw_column(rows, "a").tolist() == [None, None, None]
    assert extract_column(rows, "a").isna().all()
    assert len(ColumnCache(rows).numeric("a")) == 3


def test_column_cache_parses_each_column_once(rows):
    cache = ColumnCache(rows)
    first = cache.numeric("revenue")
    second = cache.numeric("revenue")
    assert first is second
    assert cache.raw("revenue") is cache.raw("revenue")
    assert cache.cached_columns() == ["revenue"]
    assert len(cache) == len(rows)
