#!/usr/bin/env python3
"""
Ordinary least squares line fit with coefficient of determination.

The fit never returns sentinel zeros: too few points and a zero-variance
x column come back as explicit statuses so the report can say so.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from ..merge.aggregate import CombinedRow

logger = logging.getLogger(__name__)

STATUS_OK = 'ok'
STATUS_INSUFFICIENT = 'insufficient_data'
STATUS_DEGENERATE = 'degenerate'

MIN_POINTS = 2


@dataclass(frozen=True)
class RegressionResult:
    """Outcome of a line fit y = intercept + slope * x."""
    status: str
    n: int
    slope: Optional[float] = None
    intercept: Optional[float] = None
    r_squared: Optional[float] = None  # None when y has zero variance

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def predict(self, x: float) -> float:
        if not self.ok:
            raise ValueError(f"No fitted line ({self.status})")
        return self.intercept + self.slope * x


def fit_line(xs: Sequence[float], ys: Sequence[float]) -> RegressionResult:
    """
    Fit y = intercept + slope * x by least squares.

    Args:
        xs: Explanatory values
        ys: Outcome values, same length as xs

    Returns:
        RegressionResult with status 'ok', 'insufficient_data' (fewer than
        two points) or 'degenerate' (x has no variance)
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"x and y lengths differ: {x.size} vs {y.size}")

    n = int(x.size)
    if n < MIN_POINTS:
        logger.info(f"Regression skipped: {n} data points")
        return RegressionResult(status=STATUS_INSUFFICIENT, n=n)

    # No spread in x
    if np.ptp(x) == 0 or not np.isfinite(x).all():
        logger.warning(f"Degenerate regression: no variance in x over {n} points")
        return RegressionResult(status=STATUS_DEGENERATE, n=n)

    dx = x - x.mean()
    dy = y - y.mean()
    slope = float((dx * dy).sum() / (dx * dx).sum())
    intercept = float(y.mean() - slope * x.mean())
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        logger.warning(f"Degenerate regression: non-finite coefficients over {n} points")
        return RegressionResult(status=STATUS_DEGENERATE, n=n)

    if np.ptp(y) == 0:
        r_squared = None
    else:
        residuals = y - (intercept + slope * x)
        r_squared = 1 - float((residuals ** 2).sum()) / float((dy ** 2).sum())

    return RegressionResult(
        status=STATUS_OK,
        n=n,
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
    )


def fit_combined(rows: Iterable[CombinedRow]) -> RegressionResult:
    """Explain the target-year World Bank volume by the VIIRS volume."""
    rows = list(rows)
    return fit_line([r.secondary_volume for r in rows],
                    [r.primary_volume for r in rows])
