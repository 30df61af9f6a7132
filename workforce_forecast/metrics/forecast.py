"""One-year-ahead prediction and narrative forecast summary.

Combines independent per-metric trend fits into a hiring estimate, an
overall trend vote, a sample-size confidence rating and insight strings.
"""

from __future__ import annotations

import logging
import math

from workforce_forecast.config import ForecastConfig
from workforce_forecast.data.contracts import (
    AnnualSummary,
    Confidence,
    ForecastSummary,
    OverallTrend,
    YearlyPrediction,
)
from workforce_forecast.metrics.trends import fit_and_project

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_SUMMARY = "Not enough data to generate a forecast."

_TREND_CLAUSES: dict[str, str] = {
    "positive": "Continued growth is expected.",
    "negative": "A downturn is expected.",
    "neutral": "A stable trend is expected.",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def assess_confidence(
    n_years: int, config: ForecastConfig | None = None
) -> Confidence:
    """Confidence label from the number of historical years."""
    config = config or ForecastConfig()
    if n_years >= config.high_confidence_years:
        return "high"
    if n_years >= config.medium_confidence_years:
        return "medium"
    return "low"


def estimate_hiring(
    predicted_employees: int,
    last_employees: int,
    attrition_rate: float = 0.15,
) -> int:
    """Expected hires for the coming year.

    Growth adds replacement of assumed attrition on top of net growth.
    A flat or declining projection is reported as the net change alone.
    """
    net_change = predicted_employees - last_employees
    if net_change > 0:
        return net_change + _round_half_up(last_employees * attrition_rate)
    return net_change


def generate_prediction(
    summaries: list[AnnualSummary],
    config: ForecastConfig | None = None,
) -> YearlyPrediction | None:
    """Project employees, revenue and operating profit one year ahead.

    Args:
        summaries: Annual series sorted by year ascending.
        config: Forecast thresholds (defaults if None).

    Returns:
        YearlyPrediction for the year after the last summary, or None if
        there is no history.
    """
    if not summaries:
        return None
    config = config or ForecastConfig()

    years = [int(s.year) for s in summaries]
    employee_fit = fit_and_project(
        years, [s.total_employees for s in summaries], config.slope_threshold
    )
    revenue_fit = fit_and_project(
        years, [s.revenue for s in summaries], config.slope_threshold
    )
    profit_fit = fit_and_project(
        years, [s.operating_profit for s in summaries], config.slope_threshold
    )

    last_employees = summaries[-1].total_employees
    predicted_employees = _round_half_up(employee_fit.next_value)

    prediction = YearlyPrediction(
        year=str(years[-1] + 1),
        predicted_employees=predicted_employees,
        expected_hiring=estimate_hiring(
            predicted_employees, last_employees, config.attrition_rate
        ),
        predicted_revenue=revenue_fit.next_value,
        predicted_operating_profit=profit_fit.next_value,
        employee_trend=employee_fit.trend,
        revenue_trend=revenue_fit.trend,
        operating_profit_trend=profit_fit.trend,
        confidence=assess_confidence(len(summaries), config),
    )
    logger.info(
        "Prediction %s: %d employees (%s), confidence %s",
        prediction.year,
        prediction.predicted_employees,
        prediction.employee_trend,
        prediction.confidence,
    )
    return prediction


def _growth_pct(predicted: float, last: float) -> float:
    if last > 0:
        return (predicted - last) / last * 100
    return 0.0


def _signed(pct: float) -> str:
    return f"{'+' if pct > 0 else ''}{pct:.1f}%"


def _overall_trend(growth_rates: list[float]) -> OverallTrend:
    positive = sum(1 for g in growth_rates if g > 0)
    if positive >= 2:
        return "positive"
    if positive == 0:
        return "negative"
    return "neutral"


def generate_forecast_summary(
    summaries: list[AnnualSummary],
    prediction: YearlyPrediction | None,
    config: ForecastConfig | None = None,
) -> ForecastSummary:
    """Narrative summary comparing the prediction with the last actual year.

    Args:
        summaries: Annual series sorted by year ascending.
        prediction: Output of generate_prediction.
        config: Forecast thresholds (defaults if None).

    Returns:
        ForecastSummary. Without history or prediction, a neutral,
        low-confidence insufficient-data summary with no insights.
    """
    if not summaries or prediction is None:
        return ForecastSummary(
            summary=INSUFFICIENT_DATA_SUMMARY,
            trend="neutral",
            confidence="low",
            key_insights=[],
        )
    config = config or ForecastConfig()
    last = summaries[-1]

    employee_growth = _growth_pct(
        prediction.predicted_employees, last.total_employees
    )
    revenue_growth = _growth_pct(prediction.predicted_revenue, last.revenue)
    profit_growth = _growth_pct(
        prediction.predicted_operating_profit, last.operating_profit
    )

    trend = _overall_trend([employee_growth, revenue_growth, profit_growth])

    summary = (
        f"{prediction.year} forecast: "
        f"employees {prediction.predicted_employees:,} ({_signed(employee_growth)}), "
        f"revenue KRW {prediction.predicted_revenue / 1e12:.1f}T "
        f"({_signed(revenue_growth)}). {_TREND_CLAUSES[trend]}"
    )

    insights: list[str] = []
    hires = abs(prediction.expected_hiring)
    if abs(employee_growth) > config.employee_insight_pct:
        if employee_growth > 0:
            insights.append(f"Workforce expansion expected (about {hires:,} hires)")
        else:
            insights.append(
                f"Possible workforce reduction (about {hires:,} fewer employees)"
            )
    if abs(revenue_growth) > config.revenue_insight_pct:
        insights.append(
            "Strong revenue growth expected"
            if revenue_growth > 0
            else "Revenue decline expected"
        )
    if abs(profit_growth) > config.profit_insight_pct:
        insights.append(
            "Profitability improvement expected"
            if profit_growth > 0
            else "Profitability deterioration risk"
        )
    if not insights:
        insights.append("Current trend expected to continue")

    return ForecastSummary(
        summary=summary,
        trend=trend,
        confidence=prediction.confidence,
        key_insights=insights,
    )
