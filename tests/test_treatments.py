import pandas as pd
import pytest

from scorelab import (
    AnalysisChain,
    AnalysisStep,
    ColumnDescriptor,
    FilterDefinition,
    MethodId,
    TreatmentAnalysisChain,
    TreatmentFilter,
    ZeroToOneConfig,
    apply_treatments,
)

REVENUE = ColumnDescriptor(key="revenue", data_type="currency")
SEGMENT = ColumnDescriptor(key="segment", data_type="text")


@pytest.fixture
def df():
    return pd.DataFrame(
        {
            "revenue": ["10", "20", "30", None],
            "segment": ["SMB", "SMB", "Enterprise", "SMB"],
        }
    )


@pytest.fixture
def chain():
    return AnalysisChain(
        steps=[AnalysisStep(REVENUE, MethodId.ZERO_TO_ONE_SCALING, weight=10, config=ZeroToOneConfig())],
        result_name="revenue_score",
    )


def test_chain_treatment_adds_result_column(df, chain):
    treatment = TreatmentAnalysisChain(chain)
    output = treatment.apply(df)
    assert output["db"]["revenue_score"].tolist()[:3] == [0.0, 5.0, 10.0]
    assert pd.isna(output["db"]["revenue_score"].iloc[3])
    assert "revenue_score" not in df.columns
    assert output["metrics"]["scored_rows"] == 3
    assert output["metrics"]["result_max"] == 10.0
    assert output["metrics"]["step_1_method_id"] == "zero-to-one-scaling"
    assert treatment.get_cols() == ["revenue"]
    assert treatment.get_created_cols() == ["revenue_score"]


def test_chain_treatment_refuses_to_overwrite(df, chain):
    with pytest.raises(ValueError, match="already exists"):
        TreatmentAnalysisChain(chain, result_name="revenue").apply(df)
    output = TreatmentAnalysisChain(chain, result_name="revenue", overwrite=True).apply(df)
    assert output["db"]["revenue"].tolist()[:3] == [0.0, 5.0, 10.0]


def test_chain_treatment_needs_a_name():
    chain = AnalysisChain(steps=[AnalysisStep(REVENUE, MethodId.BELL_CURVE_DISTANCE)])
    with pytest.raises(ValueError, match="name"):
        TreatmentAnalysisChain(chain)


def test_filter_then_score(df, chain):
    output = apply_treatments(
        df,
        [
            TreatmentFilter([FilterDefinition(SEGMENT, "equals", "smb")]),
            TreatmentAnalysisChain(chain),
        ],
    )
    assert output["db"].index.tolist() == [0, 1, 3]
    assert output["db"]["revenue_score"].tolist()[:2] == [0.0, 10.0]
    assert output["metrics"]["0_TreatmentFilter"] == {"rows_before": 4, "rows_after": 3}
    assert TreatmentFilter([FilterDefinition(SEGMENT, "equals", "smb")]).get_cols() == ["segment"]
