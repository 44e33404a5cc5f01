import pandas as pd
import pytest

from scorelab import ColumnDescriptor, ConfigurationError, FilterDefinition, apply_filters, available_operators
from scorelab.filters import describe_operator, filter_mask, validate_filter

REVENUE = ColumnDescriptor(key="revenue", data_type="currency", label="Revenue")
SEGMENT = ColumnDescriptor(key="segment", data_type="text")
ACTIVE = ColumnDescriptor(key="active", data_type="boolean")


def test_operators_are_gated_by_type():
    assert available_operators("percent") == ("range", "greaterThan", "lessThan")
    assert available_operators("text") == ("equals", "contains")
    assert available_operators("boolean") == ("equals",)
    assert available_operators("category") == ("equals", "contains")
    assert describe_operator("greaterThan") == "Greater than"
    assert describe_operator("other") == "Custom"


def test_no_filters_keeps_every_row(rows):
    assert apply_filters(rows, []) == rows


def test_range_filter_is_inclusive_and_order_independent(rows):
    forward = apply_filters(rows, [FilterDefinition(REVENUE, "range", (2, 4))])
    backward = apply_filters(rows, [FilterDefinition(REVENUE, "range", ("4", "2"))])
    assert [row["revenue"] for row in forward] == ["2", "3", "4"]
    assert backward == forward


def test_comparison_filters_drop_rows_without_numbers(rows):
    above = apply_filters(rows, [FilterDefinition(REVENUE, "greaterThan", 3)])
    below = apply_filters(rows, [FilterDefinition(REVENUE, "lessThan", "3")])
    assert [row["revenue"] for row in above] == ["4", "100"]
    assert [row["revenue"] for row in below] == ["1", "2"]


def test_text_filters_are_case_insensitive(rows):
    exact = apply_filters(rows, [FilterDefinition(SEGMENT, "equals", "enterprise")])
    partial = apply_filters(rows, [FilterDefinition(SEGMENT, "contains", "MARK")])
    assert len(exact) == 2
    assert [row["segment"] for row in partial] == ["Mid-Market"]


def test_boolean_filter(rows):
    kept = apply_filters(rows, [FilterDefinition(ACTIVE, "equals", True)])
    assert [row["revenue"] for row in kept] == ["1", "3"]


def test_filters_are_combined_with_and(rows):
    kept = apply_filters(
        rows,
        [
            FilterDefinition(SEGMENT, "contains", "e"),
            FilterDefinition(REVENUE, "greaterThan", 2),
        ],
    )
    assert [row["revenue"] for row in kept] == ["3", "100"]


def test_filter_mask_on_dataframe_keeps_index(rows):
    df = pd.DataFrame(rows, index=list("abcdef"))
    mask = filter_mask(df, [FilterDefinition(SEGMENT, "equals", "SMB")])
    assert mask[mask].index.tolist() == ["b", "f"]
    assert apply_filters(df, [FilterDefinition(SEGMENT, "equals", "SMB")]).index.tolist() == ["b", "f"]


@pytest.mark.parametrize(
    "definition, message",
    [
        (FilterDefinition(REVENUE, "contains", "1"), "not available"),
        (FilterDefinition(SEGMENT, "range", (1, 2)), "not available"),
        (FilterDefinition(REVENUE, "range", (1,)), "lower and an upper bound"),
        (FilterDefinition(REVENUE, "range", (1, "x")), "both bounds"),
        (FilterDefinition(REVENUE, "greaterThan", "abc"), "valid number"),
        (FilterDefinition(SEGMENT, "equals", "  "), "Provide filter values"),
        (FilterDefinition(ACTIVE, "equals", "maybe"), "true or false"),
    ],
)
def test_invalid_filters_are_rejected(definition, message):
    with pytest.raises(ConfigurationError, match=message):
        validate_filter(definition)


def test_validate_filter_normalises_values():
    assert validate_filter(FilterDefinition(REVENUE, "range", ("9", 2))).value == (2.0, 9.0)
    assert validate_filter(FilterDefinition(SEGMENT, "equals", " SMB ")).value == "SMB"
    assert FilterDefinition(REVENUE, "range", (9, 2)).describe() == "Revenue between 2 and 9"


def test_mask_has_one_entry_per_row_when_keys_are_missing():
    rows = [{}, {}, {}]
    mask = filter_mask(rows, [FilterDefinition(REVENUE, "greaterThan", 0)])
    assert mask.tolist() == [False, False, False]
    assert apply_filters(rows, [FilterDefinition(SEGMENT, "contains", "a")]) == []
