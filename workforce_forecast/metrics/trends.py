"""Linear trend fitting and one-year-ahead projection per metric."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np
from scipy.stats import linregress  # type: ignore[import-untyped]

from workforce_forecast.data.contracts import Trend, TrendFit

logger = logging.getLogger(__name__)

DEFAULT_SLOPE_THRESHOLD: float = 0.05


def classify_trend(slope: float, threshold: float = DEFAULT_SLOPE_THRESHOLD) -> Trend:
    """Classify a slope (units per year) as growth, decline or stable."""
    if slope > threshold:
        return "growth"
    if slope < -threshold:
        return "decline"
    return "stable"


def _flat_projection(values: Sequence[float]) -> TrendFit:
    """Degraded result: carry the last value forward with no trend."""
    last = float(values[-1]) if len(values) > 0 else 0.0
    if not math.isfinite(last):
        last = 0.0
    return TrendFit(next_value=last, slope=0.0, trend="stable")


def fit_and_project(
    years: Sequence[int],
    values: Sequence[float],
    slope_threshold: float = DEFAULT_SLOPE_THRESHOLD,
) -> TrendFit:
    """Fit an ordinary least-squares line and project the following year.

    With fewer than two points, or when the fit is numerically degenerate,
    the last known value is carried forward with slope 0 and a stable
    trend. Projections are floored at zero.

    Args:
        years: Calendar years, ascending.
        values: Metric value for each year, in raw units.
        slope_threshold: Absolute slope separating stable from growth/decline.

    Returns:
        TrendFit with projected value, slope and trend category.
    """
    if len(years) < 2 or len(values) < 2 or len(years) != len(values):
        return _flat_projection(values)

    x = np.asarray(years, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)

    try:
        result = linregress(x, y)
    except ValueError as e:
        logger.warning("Trend fit failed (%s), using flat projection", e)
        return _flat_projection(values)

    slope = float(result.slope)
    intercept = float(result.intercept)
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        logger.warning("Non-finite trend fit, using flat projection")
        return _flat_projection(values)

    next_year = float(years[-1]) + 1.0
    next_value = max(0.0, slope * next_year + intercept)

    return TrendFit(
        next_value=next_value,
        slope=slope,
        trend=classify_trend(slope, slope_threshold),
    )
