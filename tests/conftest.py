import pandas as pd
import pytest

from scorelab import ColumnDescriptor


@pytest.fixture
def numeric_column():
    return ColumnDescriptor(key="revenue", data_type="currency", average=22.0, median=3.0)


@pytest.fixture
def text_column():
    return ColumnDescriptor(key="segment", data_type="text")


@pytest.fixture
def rows():
    return [
        {"revenue": "1", "segment": "Enterprise", "active": "true"},
        {"revenue": "2", "segment": "SMB", "active": "false"},
        {"revenue": "3", "segment": "enterprise ", "active": "TRUE"},
        {"revenue": "4", "segment": "", "active": ""},
        {"revenue": "100", "segment": "Mid-Market"},
        {"segment": "SMB", "active": "yes"},
    ]


def series(values):
    """Float Series with None mapped to NaN."""
    return pd.Series(values, dtype=float)


def raw_series(values):
    return pd.Series(values, dtype=object)
