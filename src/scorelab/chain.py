"""Evaluating analysis chains.

A chain is an ordered list of steps joined by arithmetic operators. Each step
scores every row with one analysis method, the scores are weighted, and the
weighted step outputs are folded left to right into the result column.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .columns import ColumnDescriptor
from .config import DEFAULT_ANALYSIS_WEIGHT, OPERATORS
from .configs import MethodConfig, describe_config
from .exceptions import ConfigurationError
from .extraction import ColumnCache, Rows
from .methods import MethodId, get_method, require_method, series_to_list, to_method_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisStep:
    """One analysis method applied to one column.

    Attributes:
        column: The column the method reads.
        method_id: Which analysis method to run.
        weight: Multiplier applied to every score of the step.
        config: Method configuration, None for methods without one.
    """

    column: ColumnDescriptor
    method_id: Union[MethodId, str]
    weight: float = DEFAULT_ANALYSIS_WEIGHT
    config: Optional[MethodConfig] = None

    @property
    def effective_weight(self) -> float:
        return coerce_weight(self.weight)

    def describe(self) -> str:
        method = get_method(self.method_id)
        name = method.name if method is not None else str(self.method_id)
        summary = describe_config(self.config)
        label = f"{name} on {self.column.display_label}"
        return f"{label} ({summary})" if summary else label


def coerce_weight(weight) -> float:
    if isinstance(weight, bool) or weight is None:
        return DEFAULT_ANALYSIS_WEIGHT
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        return DEFAULT_ANALYSIS_WEIGHT
    return weight if math.isfinite(weight) else DEFAULT_ANALYSIS_WEIGHT


def build_step(
    column: ColumnDescriptor,
    method_id: Union[MethodId, str],
    weight: float = DEFAULT_ANALYSIS_WEIGHT,
    config: Optional[MethodConfig] = None,
) -> AnalysisStep:
    """Validate a step definition and return the step.

    Raises:
        UnsupportedMethodError: The method id is not registered.
        ConfigurationError: The configuration does not pass the method's validator.
    """
    method = require_method(method_id)
    validated = method.validate_config(column, config).unwrap()
    return AnalysisStep(column=column, method_id=method.method_id, weight=coerce_weight(weight), config=validated)


def _check_operators(steps: Sequence[AnalysisStep], operators: Sequence[str]) -> None:
    expected = max(0, len(steps) - 1)
    if len(operators) != expected:
        raise ConfigurationError(
            f"A chain of {len(steps)} step(s) needs {expected} operator(s), got {len(operators)}."
        )
    unknown = [op for op in operators if op not in OPERATORS]
    if unknown:
        raise ConfigurationError(f"Unknown operator(s) {unknown}. Available operators: {list(OPERATORS)}")


@dataclass
class EvaluationResult:
    """Result column of a chain and the weighted output of each step."""

    result: pd.Series
    step_values: List[pd.Series] = field(default_factory=list)
    diagnostics: List[Dict] = field(default_factory=list)

    def to_lists(self) -> Dict[str, list]:
        return {
            "result": series_to_list(self.result),
            "step_values": [series_to_list(values) for values in self.step_values],
        }


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def combine(a: Optional[float], b: Optional[float], operator: str) -> Optional[float]:
    """Combine two scores with an arithmetic operator.

    A missing operand is an absent term: the other operand is returned. Division
    by a missing or zero right-hand side yields None.
    """
    if operator not in OPERATORS:
        raise ValueError(f"Unknown operator '{operator}'. Available operators: {list(OPERATORS)}")
    a_missing, b_missing = _is_missing(a), _is_missing(b)
    if operator == "/" and (b_missing or b == 0):
        return None
    if a_missing and b_missing:
        return None
    if a_missing:
        return b
    if b_missing:
        return a
    if operator == "+":
        return a + b
    if operator == "-":
        return a - b
    if operator == "*":
        return a * b
    return a / b


def combine_series(a: pd.Series, b: pd.Series, operator: str) -> pd.Series:
    """Row-wise `combine` over two aligned score Series."""
    if operator not in OPERATORS:
        raise ValueError(f"Unknown operator '{operator}'. Available operators: {list(OPERATORS)}")
    left = a.to_numpy(dtype=float, na_value=np.nan)
    right = b.to_numpy(dtype=float, na_value=np.nan)
    left_missing, right_missing = np.isnan(left), np.isnan(right)
    both = ~left_missing & ~right_missing

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if operator == "/":
            quotient = left / np.where(right == 0, 1.0, right)
            out = np.where(right_missing | (right == 0), np.nan, np.where(left_missing, right, quotient))
        else:
            if operator == "+":
                combined = left + right
            elif operator == "-":
                combined = left - right
            else:
                combined = left * right
            out = np.where(both, combined, np.where(left_missing, right, left))

    return pd.Series(out, index=a.index, dtype=float)


def _step_scores(step: AnalysisStep, cache: ColumnCache):
    method = get_method(step.method_id)
    if method is None:
        logger.warning(
            f"Unknown analysis method '{step.method_id}' on column '{step.column.key}'; "
            "the step contributes no values"
        )
        missing = pd.Series(np.nan, index=cache.index, dtype=float)
        return missing, {"method_id": str(step.method_id), "unsupported": True}

    config = step.config
    if not method.validate_config(step.column, config).valid:
        logger.debug(f"Repairing stale configuration of '{method.method_id}' on column '{step.column.key}'")
        config = method.ensure_config(step.column, config)
    computation = method.compute(
        step.column,
        cache.numeric(step.column.key),
        cache.raw(step.column.key),
        config,
    )
    weight = step.effective_weight
    diagnostics = {"method_id": method.method_id.value, "column": step.column.key, "weight": weight}
    diagnostics.update(computation.diagnostics)
    return computation.scores * weight, diagnostics


def evaluate(rows: Rows, steps: Sequence[AnalysisStep], operators: Sequence[str]) -> EvaluationResult:
    """Score every row with the chain of steps.

    Args:
        rows: Dataset rows (mappings of column key to raw cell) or a DataFrame.
        steps: Steps in chain order.
        operators: `len(steps) - 1` operators; operator k joins the running
            result with step k + 1.

    Returns:
        EvaluationResult: `result` has one entry per row, in row order, NaN where
        the chain produces no value. Zero steps give an empty result.
    """
    steps = list(steps)
    operators = list(operators)
    if not steps:
        return EvaluationResult(result=pd.Series([], dtype=float), step_values=[])
    _check_operators(steps, operators)

    cache = ColumnCache(rows)
    logger.info(f"Evaluating {len(steps)} analysis step(s) over {len(cache)} row(s)")

    step_values: List[pd.Series] = []
    diagnostics: List[Dict] = []
    for step in steps:
        scores, step_diagnostics = _step_scores(step, cache)
        step_values.append(scores)
        diagnostics.append(step_diagnostics)

    result = step_values[0]
    for operator, values in zip(operators, step_values[1:]):
        result = combine_series(result, values, operator)

    return EvaluationResult(result=result.copy(), step_values=step_values, diagnostics=diagnostics)


@dataclass(frozen=True)
class AnalysisChain:
    """Ordered steps joined by operators, producing one derived column."""

    steps: tuple
    operators: tuple = ()
    result_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "operators", tuple(self.operators))
        if not self.steps:
            raise ConfigurationError("An analysis chain needs at least one step.")
        _check_operators(self.steps, self.operators)
        for step in self.steps:
            if to_method_id(step.method_id) is None:
                require_method(step.method_id)

    @property
    def columns(self) -> List[str]:
        """Distinct column keys read by the chain, in first-use order."""
        seen: List[str] = []
        for step in self.steps:
            if step.column.key not in seen:
                seen.append(step.column.key)
        return seen

    def evaluate(self, rows: Rows) -> EvaluationResult:
        return evaluate(rows, self.steps, self.operators)

    def describe(self) -> str:
        parts = [self.steps[0].describe()]
        for operator, step in zip(self.operators, self.steps[1:]):
            parts.append(f"{operator} {step.describe()}")
        return " ".join(parts)
