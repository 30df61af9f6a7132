"""Pipeline orchestrator.

Resolves a company, collects per-year disclosure records, builds the
annual series and produces the one-year-ahead forecast.
"""

from __future__ import annotations

import logging

from workforce_forecast.analysis.annual_series import build_annual_summaries
from workforce_forecast.analysis.extraction import (
    extract_employee_records,
    extract_financial_records,
)
from workforce_forecast.config import AnalysisConfig
from workforce_forecast.data.contracts import AnalysisResults
from workforce_forecast.data.corp_codes import CodeResolver
from workforce_forecast.data.dart import DartClient
from workforce_forecast.data.models import EmployeeRecord, FinancialRecord
from workforce_forecast.metrics.forecast import (
    generate_forecast_summary,
    generate_prediction,
)

logger = logging.getLogger(__name__)


class CompanyNotFoundError(LookupError):
    """No corp code could be resolved for the requested company name."""


def validate_request(
    company_name: str, start_year: int, end_year: int, config: AnalysisConfig
) -> None:
    """Check an analysis request.

    Raises:
        ValueError: Blank company name, reversed range, or range wider
            than config.max_year_span.
    """
    if not company_name.strip():
        raise ValueError("Company name is required.")
    if start_year > end_year:
        raise ValueError(
            f"start_year ({start_year}) must not be after end_year ({end_year})."
        )
    if end_year - start_year > config.max_year_span:
        raise ValueError(
            f"Year range {start_year}-{end_year} exceeds the maximum span "
            f"of {config.max_year_span} years."
        )


def collect_records(
    client: DartClient, corp_code: str, years: list[str]
) -> tuple[list[EmployeeRecord], list[FinancialRecord]]:
    """Fetch and extract workforce and financial records year by year.

    A year whose fetch fails contributes no records; the remaining years
    are still collected.
    """
    employee_records: list[EmployeeRecord] = []
    financial_records: list[FinancialRecord] = []

    for year in years:
        logger.info("%s: collecting %s", corp_code, year)

        workforce = client.fetch_workforce_records(corp_code, year)
        year_employees = extract_employee_records(workforce, year)
        if not year_employees:
            logger.warning(
                "%s: no workforce records for %s (%s)",
                corp_code, year, workforce.message or "empty",
            )
        employee_records.extend(year_employees)

        financials = client.fetch_financial_records(corp_code, year)
        year_financials = extract_financial_records(financials, year)
        if not year_financials:
            logger.warning(
                "%s: no financial records for %s (%s)",
                corp_code, year, financials.message or "empty",
            )
        financial_records.extend(year_financials)

    return employee_records, financial_records


def run_analysis(
    company_name: str,
    start_year: int,
    end_year: int,
    client: DartClient,
    resolver: CodeResolver,
    config: AnalysisConfig | None = None,
) -> AnalysisResults:
    """Execute the analysis pipeline for one company.

    Args:
        company_name: Company name as entered by the user.
        start_year: First business year (inclusive).
        end_year: Last business year (inclusive).
        client: DART client for per-year records.
        resolver: Company name → corp code resolver.
        config: Analysis configuration (defaults if None).

    Returns:
        AnalysisResults. When no year yields data, summaries is empty,
        prediction is None and the forecast is the insufficient-data summary.

    Raises:
        ValueError: If the request is invalid.
        CompanyNotFoundError: If the company name cannot be resolved.
    """
    config = config or AnalysisConfig()

    # Step 1: Validate request.
    validate_request(company_name, start_year, end_year, config)
    company_name = company_name.strip()
    logger.info("Starting analysis: %s, %d-%d", company_name, start_year, end_year)

    # Step 2: Resolve corp code.
    corp_code = resolver.resolve(company_name)
    if corp_code is None:
        raise CompanyNotFoundError(
            f"No company found for '{company_name}'. "
            "Check the company name and try again."
        )
    logger.info("Resolved %s -> %s", company_name, corp_code)

    # Step 3: Collect records.
    years = [str(y) for y in range(start_year, end_year + 1)]
    employee_records, financial_records = collect_records(client, corp_code, years)
    logger.info(
        "Collected %d employee and %d financial records over %d years",
        len(employee_records),
        len(financial_records),
        len(years),
    )

    # Step 4: Annual series.
    summaries = build_annual_summaries(
        company_name, corp_code, employee_records, financial_records
    )
    if not summaries:
        logger.warning("%s: no data for %d-%d", company_name, start_year, end_year)

    # Step 5: Prediction and narrative.
    prediction = generate_prediction(summaries, config.forecast)
    forecast = generate_forecast_summary(summaries, prediction, config.forecast)

    logger.info(
        "Analysis complete: %d years, forecast trend %s",
        len(summaries),
        forecast.trend,
    )
    return AnalysisResults(
        company_name=company_name,
        company_code=corp_code,
        years=years,
        summaries=summaries,
        prediction=prediction,
        forecast=forecast,
    )
