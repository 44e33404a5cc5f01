"""Converting steps, chains and filters to and from JSON-safe payloads.

Payloads use the camelCase shape of saved presets:

    step:   {"columnKey", "columnLabel", "dataType", "methodId", "methodName",
             "description", "weight", "config"}
    chain:  {"resultName", "steps": [step, ...], "operators": [...]}
    filter: {"columnKey", "columnLabel", "dataType", "operator", "value", "description"}

Loading a payload re-attaches it to the columns of the dataset currently
loaded. Step configurations go through `ensure` (the saved config may come
from another dataset) and then through validation.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .chain import AnalysisChain, AnalysisStep, build_step
from .columns import ColumnDescriptor
from .configs import (
    ConditionalFlagConfig,
    DistributionConfig,
    MethodConfig,
    OneSidedConfig,
    SignificanceConfig,
    ZeroToOneConfig,
)
from .exceptions import ConfigurationError
from .filters import FilterDefinition, validate_filter
from .methods import ensure, get_method

logger = logging.getLogger(__name__)

__all__ = [
    "chain_from_payload",
    "chain_to_payload",
    "config_from_payload",
    "config_to_payload",
    "filter_from_payload",
    "filter_to_payload",
    "step_from_payload",
    "step_to_payload",
]

# (python attribute, payload key) per configuration variant
_CONFIG_FIELDS = {
    ConditionalFlagConfig: [
        ("mode", "mode"),
        ("true_value", "trueValue"),
        ("threshold", "threshold"),
        ("min_value", "min"),
        ("max_value", "max"),
    ],
    OneSidedConfig: [
        ("baseline_mode", "baselineMode"),
        ("baseline_value", "baselineValue"),
        ("side", "side"),
        ("scaling", "scaling"),
        ("slope", "slope"),
    ],
    ZeroToOneConfig: [("scaling", "scaling"), ("slope", "slope")],
    DistributionConfig: [
        ("buckets", "buckets"),
        ("scaling", "scaling"),
        ("slope", "slope"),
        ("reward", "reward"),
    ],
    SignificanceConfig: [
        ("significance_level", "significanceLevel"),
        ("mode", "mode"),
        ("tail", "tail"),
        ("flag_significant", "flagSignificant"),
    ],
}
_CONFIG_BY_KIND = {cls.kind: cls for cls in _CONFIG_FIELDS}


def _serialize_value(obj: Any) -> Any:
    """Convert numpy scalars and non-finite floats into JSON-friendly primitives."""
    if obj is None or isinstance(obj, (str, bool, int)):
        return obj
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, (float, np.floating)):
        value = float(obj)
        return value if math.isfinite(value) else None
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, (list, tuple)):
        return [_serialize_value(v) for v in obj]
    return obj


def config_to_payload(config: Optional[MethodConfig]) -> Optional[Dict[str, Any]]:
    if config is None:
        return None
    fields = _CONFIG_FIELDS.get(type(config))
    if fields is None:
        raise TypeError(f"Unsupported configuration type {type(config).__name__}")
    payload = {"kind": config.kind}
    for attribute, key in fields:
        value = getattr(config, attribute)
        if value is not None:
            payload[key] = _serialize_value(value)
    return payload


def config_from_payload(payload: Optional[Mapping[str, Any]]) -> Optional[MethodConfig]:
    """Build the configuration variant named by payload["kind"].

    Unknown kinds give None so that `ensure` can substitute a default.
    """
    if not payload:
        return None
    cls = _CONFIG_BY_KIND.get(payload.get("kind"))
    if cls is None:
        logger.warning(f"Ignoring configuration of unknown kind '{payload.get('kind')}'")
        return None
    kwargs = {attribute: payload[key] for attribute, key in _CONFIG_FIELDS[cls] if key in payload}
    return cls(**kwargs)


def step_to_payload(step: AnalysisStep) -> Dict[str, Any]:
    method = get_method(step.method_id)
    return {
        "columnKey": step.column.key,
        "columnLabel": step.column.display_label,
        "dataType": step.column.data_type,
        "methodId": str(step.method_id),
        "methodName": method.name if method is not None else str(step.method_id),
        "description": step.column.description,
        "weight": _serialize_value(step.effective_weight),
        "config": config_to_payload(step.config),
    }


def _resolve_column(payload: Mapping[str, Any], columns: Optional[Mapping[str, ColumnDescriptor]]):
    key = payload.get("columnKey")
    if not key:
        raise ConfigurationError("Saved payload does not name a column.")
    if columns is None:
        return ColumnDescriptor(
            key=key,
            data_type=payload.get("dataType") or "numeric",
            description=payload.get("description"),
            label=payload.get("columnLabel"),
        )
    if key not in columns:
        raise ConfigurationError(f"Column '{key}' is not present in the current dataset.")
    return columns[key]


def step_from_payload(
    payload: Mapping[str, Any], columns: Optional[Mapping[str, ColumnDescriptor]] = None
) -> AnalysisStep:
    """Rebuild a validated step from a saved payload.

    Args:
        payload: The saved step.
        columns: Columns of the current dataset keyed by column key. When None,
            the column is rebuilt from the payload itself.

    Raises:
        ConfigurationError: The column is missing or the repaired configuration
            still fails validation.
    """
    column = _resolve_column(payload, columns)
    method_id = payload.get("methodId")
    config = ensure(method_id, column, config_from_payload(payload.get("config")))
    return build_step(column, method_id, payload.get("weight"), config)


def chain_to_payload(chain: AnalysisChain) -> Dict[str, Any]:
    return {
        "resultName": chain.result_name,
        "steps": [step_to_payload(step) for step in chain.steps],
        "operators": list(chain.operators),
    }


def chain_from_payload(
    payload: Mapping[str, Any], columns: Optional[Mapping[str, ColumnDescriptor]] = None
) -> AnalysisChain:
    steps = [step_from_payload(step, columns) for step in payload.get("steps", [])]
    return AnalysisChain(
        steps=steps,
        operators=payload.get("operators", []),
        result_name=payload.get("resultName"),
    )


def filter_to_payload(definition: FilterDefinition) -> Dict[str, Any]:
    return {
        "columnKey": definition.column.key,
        "columnLabel": definition.column.display_label,
        "dataType": definition.column.data_type,
        "operator": definition.operator,
        "value": _serialize_value(definition.value),
        "description": definition.column.description,
    }


def filter_from_payload(
    payload: Mapping[str, Any], columns: Optional[Mapping[str, ColumnDescriptor]] = None
) -> FilterDefinition:
    column = _resolve_column(payload, columns)
    operator = payload.get("operator")
    if isinstance(operator, Mapping):
        operator = operator.get("operator")
    value = payload.get("value")
    if isinstance(value, list):
        value = tuple(value)
    return validate_filter(FilterDefinition(column=column, operator=operator, value=value))
