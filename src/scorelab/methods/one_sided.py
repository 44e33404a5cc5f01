from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from ..configs import BASELINE_MODES, SIDES, OneSidedConfig, ValidationResult, is_finite_number
from .base import (
    AnalysisMethod,
    MethodComputation,
    MethodId,
    apply_scaling,
    check_scaling,
    empty_scores,
    finite_mask,
    repair_scaling,
)

logger = logging.getLogger(__name__)


def resolve_baseline(column, config: OneSidedConfig) -> float:
    """Baseline the distances are measured from.

    Falls back to the column average, then median, then 0 when the configured
    source is not available.
    """
    if config.baseline_mode == "average" and column.average is not None:
        return column.average
    if config.baseline_mode == "median" and column.median is not None:
        return column.median
    if config.baseline_mode == "custom" and is_finite_number(config.baseline_value):
        return float(config.baseline_value)
    return column.baseline()


class OneSidedDistance(AnalysisMethod):
    """Scores how far a value sits beyond a baseline on one chosen side.

    The most extreme value on that side scores 1 and the baseline scores 0;
    values on the other side of the baseline score 0.
    """

    method_id = MethodId.ONE_SIDED_DISTANCE
    requires_numeric = True

    def default_config(self, column):
        if column is not None and column.average is not None:
            return OneSidedConfig(baseline_mode="average", baseline_value=column.average)
        if column is not None and column.median is not None:
            return OneSidedConfig(baseline_mode="median", baseline_value=column.median)
        baseline = column.baseline() if column is not None else 0.0
        return OneSidedConfig(baseline_mode="custom", baseline_value=baseline)

    def ensure_config(self, column, config):
        if not isinstance(config, OneSidedConfig):
            return self.default_config(column)

        scaling, slope = repair_scaling(config.scaling, config.slope)
        baseline_mode = config.baseline_mode if config.baseline_mode in BASELINE_MODES else "custom"
        baseline_value = config.baseline_value
        if column is not None:
            if baseline_mode == "average" and column.average is not None:
                baseline_value = column.average
            elif baseline_mode == "median" and column.median is not None:
                baseline_value = column.median
            elif not is_finite_number(baseline_value):
                baseline_value = column.baseline()
        if not is_finite_number(baseline_value):
            baseline_value = 0.0

        return replace(
            config,
            baseline_mode=baseline_mode,
            baseline_value=float(baseline_value),
            side=config.side if config.side in SIDES else "right",
            scaling=scaling,
            slope=slope,
        )

    def validate_config(self, column, config):
        if not isinstance(config, OneSidedConfig):
            return ValidationResult.fail("Configure the one-sided analysis before adding this step.")
        if column is None or not column.is_numeric:
            return ValidationResult.fail("Select a numeric column to use the one-sided analysis.")
        if config.baseline_mode not in BASELINE_MODES:
            return ValidationResult.fail("Choose where the baseline comes from.")
        if not is_finite_number(config.baseline_value):
            return ValidationResult.fail("Enter a numeric baseline for the one-sided analysis.")
        if config.side not in SIDES:
            return ValidationResult.fail("Choose which side of the baseline should be rewarded.")
        error = check_scaling(
            config.scaling,
            config.slope,
            "Choose how the scores should ramp away from the baseline.",
            "Provide a positive slope to control the score ramp.",
        )
        if error:
            return ValidationResult.fail(error)
        return ValidationResult.ok(config)

    def compute(self, column, values, raw, config=None):
        config = self.ensure_config(column, config)
        baseline = resolve_baseline(column, config)
        mask = finite_mask(values)
        scores = empty_scores(values.index)
        observed = values.to_numpy(dtype=float, na_value=np.nan)[mask]

        if config.side == "right":
            extreme = max(baseline, float(observed.max())) if observed.size else baseline
            on_side = observed > baseline
        else:
            extreme = min(baseline, float(observed.min())) if observed.size else baseline
            on_side = observed < baseline

        denominator = abs(extreme - baseline)
        diagnostics = {"baseline": baseline, "extreme": extreme, "side": config.side}
        if denominator <= 0:
            logger.debug(f"No values beyond the baseline on the {config.side} of '{column.key}'")
            scores[mask] = 0.0
            return MethodComputation(scores, {**diagnostics, "degenerate": True})

        distance = np.abs(observed - baseline) / denominator
        scores[mask] = np.where(on_side, apply_scaling(distance, config.scaling), 0.0)
        return MethodComputation(scores, {**diagnostics, "degenerate": False})
