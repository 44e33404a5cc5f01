import json

import pytest

from scorelab import (
    AnalysisChain,
    AnalysisStep,
    ColumnDescriptor,
    ConditionalFlagConfig,
    ConfigurationError,
    FilterDefinition,
    MethodId,
    OneSidedConfig,
    UnsupportedMethodError,
    index_columns,
)
from scorelab.serialization import (
    chain_from_payload,
    chain_to_payload,
    config_from_payload,
    config_to_payload,
    filter_from_payload,
    filter_to_payload,
    step_from_payload,
    step_to_payload,
)

REVENUE = ColumnDescriptor(key="revenue", data_type="currency", average=22.0, label="Revenue")
SEGMENT = ColumnDescriptor(key="segment", data_type="text")


def test_config_payload_uses_saved_preset_keys():
    payload = config_to_payload(ConditionalFlagConfig(mode="range", min_value=1, max_value=5))
    assert payload == {"kind": "conditional-flag", "mode": "range", "min": 1, "max": 5}
    assert config_from_payload(payload) == ConditionalFlagConfig(mode="range", min_value=1, max_value=5)


def test_config_from_payload_ignores_unknown_kind():
    assert config_from_payload({"kind": "mystery", "mode": "x"}) is None
    assert config_from_payload(None) is None


def test_step_payload_is_json_safe():
    step = AnalysisStep(REVENUE, MethodId.ONE_SIDED_DISTANCE, weight=2, config=OneSidedConfig(baseline_value=22.0))
    payload = step_to_payload(step)
    assert json.loads(json.dumps(payload)) == payload
    assert payload["methodId"] == "one-sided-distance"
    assert payload["methodName"] == "One-sided distance"
    assert payload["columnLabel"] == "Revenue"
    assert payload["config"]["baselineMode"] == "average"


def test_step_reattached_to_new_dataset_is_repaired():
    saved = step_to_payload(
        AnalysisStep(REVENUE, MethodId.ONE_SIDED_DISTANCE, config=OneSidedConfig(baseline_value=22.0))
    )
    new_revenue = ColumnDescriptor(key="revenue", data_type="currency", average=40.0)
    step = step_from_payload(saved, {"revenue": new_revenue})
    assert step.column is new_revenue
    assert step.config.baseline_value == 40.0


def test_step_from_payload_rejects_missing_column():
    saved = step_to_payload(AnalysisStep(REVENUE, MethodId.BELL_CURVE_DISTANCE))
    with pytest.raises(ConfigurationError, match="not present"):
        step_from_payload(saved, {"segment": SEGMENT})


def test_step_from_payload_rejects_unknown_method():
    with pytest.raises(UnsupportedMethodError):
        step_from_payload({"columnKey": "revenue", "methodId": "retired-method"})


def test_step_from_payload_still_validates():
    saved = {"columnKey": "segment", "dataType": "text", "methodId": "zero-to-one-scaling"}
    with pytest.raises(ConfigurationError, match="numeric column"):
        step_from_payload(saved, {"segment": SEGMENT})


def test_chain_round_trip():
    chain = AnalysisChain(
        steps=[
            AnalysisStep(REVENUE, MethodId.BELL_CURVE_DISTANCE, weight=0.5),
            AnalysisStep(SEGMENT, MethodId.CONDITIONAL_FLAG, config=ConditionalFlagConfig(true_value="SMB")),
        ],
        operators=["*"],
        result_name="smb_outliers",
    )
    payload = json.loads(json.dumps(chain_to_payload(chain)))
    restored = chain_from_payload(payload, index_columns([REVENUE, SEGMENT]))
    assert restored == chain


def test_chain_from_payload_without_columns_rebuilds_descriptors():
    payload = {
        "resultName": "scaled",
        "steps": [{"columnKey": "x", "dataType": "numeric", "methodId": "zero-to-one-scaling"}],
        "operators": [],
    }
    chain = chain_from_payload(payload)
    assert chain.steps[0].column.key == "x"
    assert chain.steps[0].config.scaling == "linear"


def test_filter_round_trip():
    definition = FilterDefinition(REVENUE, "range", (5.0, 10.0))
    payload = filter_to_payload(definition)
    assert payload["value"] == [5.0, 10.0]
    assert filter_from_payload(payload, {"revenue": REVENUE}) == definition


def test_filter_from_payload_accepts_typed_operator():
    payload = {
        "columnKey": "segment",
        "dataType": "text",
        "operator": {"type": "text", "operator": "contains"},
        "value": " smb ",
    }
    definition = filter_from_payload(payload)
    assert definition.operator == "contains"
    assert definition.value == "smb"
