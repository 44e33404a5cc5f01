from __future__ import annotations

import numpy as np
import pandas as pd

from ..configs import CONDITIONAL_MODES, ConditionalFlagConfig, ValidationResult, is_finite_number
from .base import AnalysisMethod, MethodComputation, MethodId, empty_scores, finite_mask

NUMERIC_MODES = ("min", "max", "range")


def _normalise_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def _flag_statistics(scores: pd.Series) -> dict:
    observed = scores.dropna().to_numpy(dtype=float)
    if observed.size == 0:
        return {"mean": 0.0, "std_dev": 0.0, "max_z": 0.0, "matches": 0}
    mean = float(observed.mean())
    std_dev = float(observed.std())
    max_z = float(np.max(np.abs(observed - mean)) / std_dev) if std_dev > 0 else 0.0
    return {"mean": mean, "std_dev": std_dev, "max_z": max_z, "matches": int(observed.sum())}


class ConditionalFlag(AnalysisMethod):
    """Outputs 1 for rows meeting a rule on the column, 0 otherwise.

    Numeric modes score a missing or unparseable cell as 0: an absent
    measurement does not meet the condition.
    """

    method_id = MethodId.CONDITIONAL_FLAG

    def default_config(self, column):
        if column is not None and column.is_numeric:
            return ConditionalFlagConfig(mode="min", threshold=column.baseline())
        return ConditionalFlagConfig(mode="binary", true_value="true")

    def ensure_config(self, column, config):
        if not isinstance(config, ConditionalFlagConfig):
            return self.default_config(column)
        if config.mode in NUMERIC_MODES and column is not None and not column.is_numeric:
            return self.default_config(column)
        return config

    def validate_config(self, column, config):
        if not isinstance(config, ConditionalFlagConfig) or config.mode not in CONDITIONAL_MODES:
            return ValidationResult.fail("Configure the condition before adding this step.")
        if config.mode == "binary":
            if not isinstance(config.true_value, str) or not config.true_value.strip():
                return ValidationResult.fail("Provide the value that should be treated as true.")
        elif config.mode in ("min", "max"):
            if not is_finite_number(config.threshold):
                return ValidationResult.fail("Enter a numeric threshold for this condition.")
        elif config.mode == "range":
            if not is_finite_number(config.min_value) or not is_finite_number(config.max_value):
                return ValidationResult.fail("Enter both bounds for the numeric range.")
        return ValidationResult.ok(config)

    def compute(self, column, values, raw, config=None):
        if not isinstance(config, ConditionalFlagConfig):
            return MethodComputation(empty_scores(raw.index), _flag_statistics(empty_scores(raw.index)))

        if config.mode == "boolean":
            flags = np.array([_normalise_text(v) == "true" for v in raw.tolist()], dtype=bool)
        elif config.mode == "binary":
            target = _normalise_text(config.true_value)
            if not target:
                return MethodComputation(empty_scores(raw.index), _flag_statistics(empty_scores(raw.index)))
            flags = np.array([_normalise_text(v) == target for v in raw.tolist()], dtype=bool)
        elif config.mode in NUMERIC_MODES:
            flags = self._numeric_flags(values, config)
            if flags is None:
                return MethodComputation(empty_scores(values.index), _flag_statistics(empty_scores(values.index)))
        else:
            return MethodComputation(empty_scores(raw.index), _flag_statistics(empty_scores(raw.index)))

        scores = pd.Series(flags.astype(float), index=raw.index, dtype=float)
        return MethodComputation(scores, _flag_statistics(scores))

    @staticmethod
    def _numeric_flags(values, config):
        mask = finite_mask(values)
        numbers = np.where(mask, values.to_numpy(dtype=float, na_value=np.nan), 0.0)
        if config.mode == "range":
            if not is_finite_number(config.min_value) or not is_finite_number(config.max_value):
                return None
            lower = min(config.min_value, config.max_value)
            upper = max(config.min_value, config.max_value)
            hits = (numbers >= lower) & (numbers <= upper)
        else:
            if not is_finite_number(config.threshold):
                return None
            hits = numbers >= config.threshold if config.mode == "min" else numbers <= config.threshold
        return mask & hits
