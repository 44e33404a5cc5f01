from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..columns import ColumnDescriptor
from ..config import DEFAULT_SLOPES, SCALING_CURVES, method_catalogue
from ..configs import MethodConfig, ValidationResult, is_finite_number

_CATALOGUE = {entry["id"]: entry for entry in method_catalogue}


class MethodId(str, Enum):
    """Identifiers of the analysis methods, as stored in saved chains."""

    BELL_CURVE_DISTANCE = "bell-curve-distance"
    CONDITIONAL_FLAG = "conditional-flag"
    ONE_SIDED_DISTANCE = "one-sided-distance"
    ZERO_TO_ONE_SCALING = "zero-to-one-scaling"
    DISTRIBUTION_DENSITY = "distribution-density"
    SIGNIFICANCE_FLAG = "significance-flag"

    def __str__(self):
        return self.value


@dataclass
class MethodComputation:
    """Scores produced by one method plus the statistics behind them."""

    scores: pd.Series
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def to_list(self):
        return series_to_list(self.scores)


def series_to_list(series: pd.Series) -> list:
    """Plain list view of a score Series, None standing in for missing scores."""
    return [None if pd.isna(v) else float(v) for v in series.tolist()]


def empty_scores(index: pd.Index) -> pd.Series:
    return pd.Series(np.nan, index=index, dtype=float)


def finite_mask(values: pd.Series) -> np.ndarray:
    return np.isfinite(values.to_numpy(dtype=float, na_value=np.nan))


def apply_scaling(ratio: np.ndarray, scaling: str) -> np.ndarray:
    """Shape a [0, 1] ratio with the configured curve, clamped to [0, 1].

    `exponential` and `quadratic` square the ratio; `linear` and `logarithmic`
    leave it as is.
    """
    if scaling in ("exponential", "quadratic"):
        ratio = ratio**2
    return np.clip(ratio, 0.0, 1.0)


class AnalysisMethod:
    """Base interface for analysis methods.

    Usage pattern:
    - default_config(column): configuration for a freshly added step
    - validate_config(column, config): gate applied before a step joins a chain
    - ensure_config(column, config): best-effort repair, never raises
    - compute(column, values, raw, config): per-row scores for one column
    """

    method_id: MethodId
    name: str = ""
    short_description: str = ""
    description: str = ""
    requires_numeric: bool = False

    def __init__(self):
        entry = _CATALOGUE.get(self.method_id.value, {})
        self.name = self.name or entry.get("name", self.method_id.value)
        self.short_description = self.short_description or entry.get("short_description", "")
        self.description = self.description or entry.get("description", "")

    def default_config(self, column: Optional[ColumnDescriptor]) -> Optional[MethodConfig]:
        return None

    def ensure_config(
        self, column: Optional[ColumnDescriptor], config: Optional[MethodConfig]
    ) -> Optional[MethodConfig]:
        return config

    def validate_config(
        self, column: Optional[ColumnDescriptor], config: Optional[MethodConfig]
    ) -> ValidationResult:
        return ValidationResult.ok(config)

    def compute(
        self,
        column: ColumnDescriptor,
        values: pd.Series,
        raw: pd.Series,
        config: Optional[MethodConfig] = None,
    ) -> MethodComputation:
        raise NotImplementedError

    def describe(self) -> Dict[str, str]:
        return {
            "id": self.method_id.value,
            "name": self.name,
            "short_description": self.short_description,
            "description": self.description,
        }

    def __repr__(self):
        return f"{type(self).__name__}({self.method_id.value!r})"


def repair_scaling(scaling, slope):
    """Return a usable (scaling, slope) pair for a possibly stale config."""
    if scaling == "quadratic":
        return "exponential", 2.0
    if scaling not in DEFAULT_SLOPES:
        scaling = "linear"
    if not is_finite_number(slope) or slope <= 0:
        slope = DEFAULT_SLOPES[scaling]
    return scaling, float(slope)


def check_scaling(scaling, slope, scaling_error: str, slope_error: str) -> Optional[str]:
    if scaling not in SCALING_CURVES:
        return scaling_error
    if not is_finite_number(slope) or slope <= 0:
        return slope_error
    return None
