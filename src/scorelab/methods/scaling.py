from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from ..configs import ValidationResult, ZeroToOneConfig
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


class ZeroToOneScaling(AnalysisMethod):
    """Min-max normalisation of the column onto [0, 1]."""

    method_id = MethodId.ZERO_TO_ONE_SCALING
    requires_numeric = True

    def default_config(self, column):
        return ZeroToOneConfig()

    def ensure_config(self, column, config):
        if not isinstance(config, ZeroToOneConfig):
            return self.default_config(column)
        scaling, slope = repair_scaling(config.scaling, config.slope)
        return replace(config, scaling=scaling, slope=slope)

    def validate_config(self, column, config):
        if not isinstance(config, ZeroToOneConfig):
            return ValidationResult.fail("Configure the scaling before adding this step.")
        if column is None or not column.is_numeric:
            return ValidationResult.fail("Select a numeric column to scale between 0 and 1.")
        error = check_scaling(
            config.scaling,
            config.slope,
            "Choose how the values should be re-scaled between 0 and 1.",
            "Provide a positive slope for the scaling curve.",
        )
        if error:
            return ValidationResult.fail(error)
        return ValidationResult.ok(config)

    def compute(self, column, values, raw, config=None):
        config = self.ensure_config(column, config)
        mask = finite_mask(values)
        scores = empty_scores(values.index)
        if not mask.any():
            return MethodComputation(scores, {"min": None, "max": None, "degenerate": True})

        observed = values.to_numpy(dtype=float, na_value=np.nan)[mask]
        lowest, highest = float(observed.min()), float(observed.max())
        if highest == lowest:
            logger.debug(f"Column '{column.key}' has a flat range; scaled scores are all 0")
            scores[mask] = 0.0
            return MethodComputation(scores, {"min": lowest, "max": highest, "degenerate": True})

        ratio = (observed - lowest) / (highest - lowest)
        scores[mask] = apply_scaling(ratio, config.scaling)
        return MethodComputation(scores, {"min": lowest, "max": highest, "degenerate": False})
