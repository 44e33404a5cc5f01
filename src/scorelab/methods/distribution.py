from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from ..config import MIN_BUCKETS
from ..configs import REWARD_MODES, DistributionConfig, ValidationResult, is_finite_number
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


def _is_bucket_count(value) -> bool:
    return is_finite_number(value) and float(value).is_integer() and value >= MIN_BUCKETS


def assign_buckets(observed: np.ndarray, buckets: int):
    """Equal-width bucket index for each value over [min, max].

    The maximum lands in the last bucket. Returns (bucket_ids, edges).
    """
    lowest, highest = float(observed.min()), float(observed.max())
    edges = np.linspace(lowest, highest, buckets + 1)
    if highest == lowest:
        return np.zeros(observed.size, dtype=int), edges
    width = (highest - lowest) / buckets
    bucket_ids = np.floor((observed - lowest) / width).astype(int)
    return np.clip(bucket_ids, 0, buckets - 1), edges


class DistributionDensity(AnalysisMethod):
    """Scores each row by how populated its part of the distribution is.

    With ``reward="most"`` rows in the fullest bucket score 1 and rows in the
    emptiest occupied bucket score 0; ``reward="least"`` flips that. When every
    occupied bucket holds the same number of rows, ``most`` scores 1 and
    ``least`` scores 0 across the board.
    """

    method_id = MethodId.DISTRIBUTION_DENSITY
    requires_numeric = True

    def default_config(self, column):
        return DistributionConfig()

    def ensure_config(self, column, config):
        if not isinstance(config, DistributionConfig):
            return self.default_config(column)
        scaling, slope = repair_scaling(config.scaling, config.slope)
        buckets = int(config.buckets) if _is_bucket_count(config.buckets) else MIN_BUCKETS
        reward = config.reward if config.reward in REWARD_MODES else "least"
        return replace(config, buckets=buckets, scaling=scaling, slope=slope, reward=reward)

    def validate_config(self, column, config):
        if not isinstance(config, DistributionConfig):
            return ValidationResult.fail("Configure the distribution buckets before adding this step.")
        if column is None or not column.is_numeric:
            return ValidationResult.fail("Select a numeric column for the distribution analysis.")
        if not _is_bucket_count(config.buckets):
            return ValidationResult.fail("Use at least two buckets to analyse the distribution.")
        if config.reward not in REWARD_MODES:
            return ValidationResult.fail("Choose whether to reward the least or most populated buckets.")
        error = check_scaling(
            config.scaling,
            config.slope,
            "Select how scores should ramp based on bucket popularity.",
            "Provide a positive slope to control how sharply scores climb.",
        )
        if error:
            return ValidationResult.fail(error)
        return ValidationResult.ok(config)

    def compute(self, column, values, raw, config=None):
        config = self.ensure_config(column, config)
        mask = finite_mask(values)
        scores = empty_scores(values.index)
        if not mask.any():
            return MethodComputation(scores, {"bucket_counts": [0] * config.buckets, "edges": [], "degenerate": True})

        observed = values.to_numpy(dtype=float, na_value=np.nan)[mask]
        bucket_ids, edges = assign_buckets(observed, config.buckets)
        counts = np.bincount(bucket_ids, minlength=config.buckets)
        row_counts = counts[bucket_ids].astype(float)

        occupied = counts[counts > 0].astype(float)
        if config.scaling == "logarithmic":
            occupied = np.log1p(occupied)
            row_counts = np.log1p(row_counts)
        low, high = float(occupied.min()), float(occupied.max())

        diagnostics = {
            "bucket_counts": counts.tolist(),
            "edges": edges.tolist(),
            "reward": config.reward,
        }
        if high == low:
            logger.debug(f"Column '{column.key}' fills its buckets evenly; scores are constant")
            scores[mask] = 1.0 if config.reward == "most" else 0.0
            return MethodComputation(scores, {**diagnostics, "degenerate": True})

        if config.reward == "most":
            ratio = (row_counts - low) / (high - low)
        else:
            ratio = (high - row_counts) / (high - low)
        scores[mask] = apply_scaling(ratio, config.scaling)
        return MethodComputation(scores, {**diagnostics, "degenerate": False})
