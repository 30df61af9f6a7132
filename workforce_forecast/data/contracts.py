"""Pipeline data contracts.

Dataclasses defining the shape of data passed between pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Trend = Literal["growth", "decline", "stable"]
OverallTrend = Literal["positive", "negative", "neutral"]
Confidence = Literal["high", "medium", "low"]


@dataclass
class AnnualSummary:
    """One row of the per-year series.

    Monetary financials are in KRW as reported; avg_salary is in millions
    of KRW. Growth rates are percentages relative to the preceding year,
    None when no valid preceding value exists.
    """

    company_name: str
    company_code: str
    year: str
    total_employees: int
    avg_salary: float
    revenue: float
    operating_profit: float
    net_income: float
    total_assets: float
    employee_growth_rate: float | None = None
    salary_growth_rate: float | None = None
    revenue_growth_rate: float | None = None
    operating_profit_growth_rate: float | None = None


@dataclass
class TrendFit:
    """Linear trend fitted to one metric."""

    next_value: float
    slope: float
    trend: Trend


@dataclass
class YearlyPrediction:
    """One-year-ahead projection."""

    year: str
    predicted_employees: int
    expected_hiring: int
    predicted_revenue: float
    predicted_operating_profit: float
    employee_trend: Trend
    revenue_trend: Trend
    operating_profit_trend: Trend
    confidence: Confidence


@dataclass
class ForecastSummary:
    """Narrative summary of a prediction."""

    summary: str
    trend: OverallTrend
    confidence: Confidence
    key_insights: list[str] = field(default_factory=list)


@dataclass
class AnalysisResults:
    """Complete pipeline output for one company."""

    company_name: str
    company_code: str
    years: list[str]
    summaries: list[AnnualSummary]
    prediction: YearlyPrediction | None
    forecast: ForecastSummary
