from __future__ import annotations

import numpy as np

from ..config import DEFAULT_SIGNIFICANCE_LEVEL, SIGNIFICANCE_LEVEL_BOUNDS
from ..configs import SIGNIFICANCE_MODES, TAILS, SignificanceConfig, ValidationResult, is_finite_number
from .base import AnalysisMethod, MethodComputation, MethodId, empty_scores, finite_mask


class SignificanceFlag(AnalysisMethod):
    """Flags values at or below the configured significance level.

    ``mode`` and ``tail`` are stored with the step but the comparison itself is
    the plain threshold test ``value <= significance_level``.
    """

    method_id = MethodId.SIGNIFICANCE_FLAG
    requires_numeric = True

    def default_config(self, column):
        return SignificanceConfig()

    def ensure_config(self, column, config):
        if not isinstance(config, SignificanceConfig):
            return self.default_config(column)
        level = config.significance_level
        if not is_finite_number(level):
            level = DEFAULT_SIGNIFICANCE_LEVEL
        if level <= 1:
            level = level * 100
        lower, upper = SIGNIFICANCE_LEVEL_BOUNDS
        return SignificanceConfig(
            significance_level=float(min(upper, max(lower, level))),
            mode=config.mode if config.mode in SIGNIFICANCE_MODES else "two-sided",
            tail=config.tail if config.tail in TAILS else "upper",
            flag_significant=bool(config.flag_significant),
        )

    def validate_config(self, column, config):
        if not isinstance(config, SignificanceConfig):
            return ValidationResult.fail("Configure the significance check before adding this step.")
        if column is None or not column.is_numeric:
            return ValidationResult.fail("Select a numeric column to apply the significance test.")
        level = config.significance_level
        if not is_finite_number(level) or level <= 0 or level >= 100:
            return ValidationResult.fail(
                "Enter a significance coverage between 0 and 100 (for example 95 for a 95% interval)."
            )
        if config.mode not in SIGNIFICANCE_MODES:
            return ValidationResult.fail("Choose whether to test one side or both tails of the distribution.")
        if config.mode == "one-sided" and config.tail not in TAILS:
            return ValidationResult.fail("Select which side of the distribution should count as significant.")
        if not isinstance(config.flag_significant, bool):
            return ValidationResult.fail("Choose whether significant or non-significant rows are flagged.")
        return ValidationResult.ok(config)

    def compute(self, column, values, raw, config=None):
        if not isinstance(config, SignificanceConfig):
            config = self.default_config(column)
        mask = finite_mask(values)
        scores = empty_scores(values.index)
        observed = values.to_numpy(dtype=float, na_value=np.nan)[mask]

        significant = observed <= config.significance_level
        flagged = significant if config.flag_significant else ~significant
        scores[mask] = flagged.astype(float)
        return MethodComputation(
            scores,
            {
                "significance_level": config.significance_level,
                "significant_rows": int(significant.sum()),
                "flagged_rows": int(flagged.sum()),
            },
        )
