from __future__ import annotations

import logging

import numpy as np

from .base import AnalysisMethod, MethodComputation, MethodId, empty_scores, finite_mask

logger = logging.getLogger(__name__)


class BellCurveDistance(AnalysisMethod):
    """Log-scaled distance from the column mean, in standard deviations.

    Each finite value gets ``z = |x - mean| / std`` (population statistics) and
    scores ``log1p(z) / log1p(max_z)``, so the furthest row scores 1. The log
    keeps a single extreme outlier from pushing every other row towards 0.
    A column with no spread scores 0 on every row that holds a number.
    """

    method_id = MethodId.BELL_CURVE_DISTANCE
    requires_numeric = True

    def compute(self, column, values, raw, config=None):
        mask = finite_mask(values)
        scores = empty_scores(values.index)
        if not mask.any():
            return MethodComputation(scores, {"mean": 0.0, "std_dev": 0.0, "max_z": 0.0, "degenerate": True})

        observed = values.to_numpy(dtype=float, na_value=np.nan)[mask]
        mean = float(observed.mean())
        std_dev = float(observed.std())

        if std_dev == 0 or np.ptp(observed) == 0:
            logger.debug(f"Column '{column.key}' has no spread; bell curve scores are all 0")
            scores[mask] = 0.0
            return MethodComputation(scores, {"mean": mean, "std_dev": 0.0, "max_z": 0.0, "degenerate": True})

        z_scores = np.abs(observed - mean) / std_dev
        max_z = float(z_scores.max())
        if max_z <= 0:
            scores[mask] = 0.0
        else:
            scores[mask] = np.clip(np.log1p(z_scores) / np.log1p(max_z), 0.0, 1.0)

        return MethodComputation(
            scores,
            {"mean": mean, "std_dev": std_dev, "max_z": max_z, "degenerate": False},
        )
