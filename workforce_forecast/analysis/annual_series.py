"""Annual series: one summary row per year plus year-over-year growth.

Aggregates extracted workforce and financial records by year. Financial
figures come from consolidated statements when the year has any, otherwise
from standalone statements; the two are never mixed within a year.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, fields

import pandas as pd

from workforce_forecast.analysis.extraction import KEY_ACCOUNTS
from workforce_forecast.config import CONSOLIDATED, SALARY_UNIT, STANDALONE
from workforce_forecast.data.contracts import AnnualSummary
from workforce_forecast.data.models import EmployeeRecord, FinancialRecord

logger = logging.getLogger(__name__)

# Summary attribute → key account term summed into it
_SUMMED_ACCOUNTS = {
    "revenue": KEY_ACCOUNTS["revenue"],
    "operating_profit": KEY_ACCOUNTS["operating_profit"],
    "net_income": KEY_ACCOUNTS["net_income"],
    "total_assets": KEY_ACCOUNTS["total_assets"],
}

# Growth rate attribute → source attribute
_GROWTH_FIELDS = {
    "employee_growth_rate": "total_employees",
    "salary_growth_rate": "avg_salary",
    "revenue_growth_rate": "revenue",
    "operating_profit_growth_rate": "operating_profit",
}


def _to_frame(records: list, record_type: type) -> pd.DataFrame:
    """Records → DataFrame with a stable column set even when empty."""
    columns = [f.name for f in fields(record_type)]
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


def _numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def calculate_growth_rate(
    current: float | None, previous: float | None
) -> float | None:
    """Percentage change from previous to current.

    Returns None when previous is missing or zero, or either value is NaN.
    """
    if current is None or previous is None:
        return None
    if math.isnan(current) or math.isnan(previous) or previous == 0:
        return None
    return (current - previous) / abs(previous) * 100


def _average_salary(year_emp: pd.DataFrame, total_employees: int) -> float:
    """Payroll-weighted average salary, else mean of row averages, else 0."""
    total_payroll = float(_numeric(year_emp["total_payroll"]).fillna(0).sum())
    if total_employees > 0 and total_payroll > 0:
        return total_payroll / total_employees / SALARY_UNIT

    salaries = _numeric(year_emp["avg_salary"]).dropna()
    if not salaries.empty:
        return float(salaries.mean())
    return 0.0


def _select_statements(fin: pd.DataFrame, year: str) -> pd.DataFrame:
    """Consolidated rows for the year, or standalone rows if none."""
    year_fin = fin[fin["year"] == year]
    selected = year_fin[year_fin["fs_div"] == CONSOLIDATED]
    if selected.empty:
        selected = year_fin[year_fin["fs_div"] == STANDALONE]
        if not selected.empty:
            logger.debug("%s: no consolidated statements, using standalone", year)
    return selected


def _sum_account(selected: pd.DataFrame, term: str) -> float:
    matches = selected[
        selected["account_name"].astype(str).str.contains(term, regex=False)
    ]
    return float(_numeric(matches["current_amount"]).fillna(0).sum())


def build_annual_summaries(
    company_name: str,
    company_code: str,
    employee_records: list[EmployeeRecord],
    financial_records: list[FinancialRecord],
) -> list[AnnualSummary]:
    """Aggregate extracted records into one AnnualSummary per year.

    Args:
        company_name: Company display name.
        company_code: DART corp code.
        employee_records: Extracted workforce records for all years.
        financial_records: Extracted financial records for all years.

    Returns:
        Summaries sorted by year ascending, with growth rates filled in.
        Empty if both inputs are empty.
    """
    emp = _to_frame(employee_records, EmployeeRecord)
    fin = _to_frame(financial_records, FinancialRecord)

    years = sorted(set(emp["year"]).union(fin["year"]))
    if not years:
        logger.warning("%s: no records to summarise", company_name)
        return []

    summaries: list[AnnualSummary] = []
    for year in years:
        year_emp = emp[emp["year"] == year]
        total_employees = int(_numeric(year_emp["employee_count"]).fillna(0).sum())
        avg_salary = _average_salary(year_emp, total_employees)

        selected = _select_statements(fin, year)
        amounts = {
            attr: _sum_account(selected, term)
            for attr, term in _SUMMED_ACCOUNTS.items()
        }

        summaries.append(
            AnnualSummary(
                company_name=company_name,
                company_code=company_code,
                year=year,
                total_employees=total_employees,
                avg_salary=round(avg_salary, 2),
                **amounts,
            )
        )

    _apply_growth_rates(summaries)

    logger.info(
        "%s: built %d annual summaries (%s-%s)",
        company_name, len(summaries), years[0], years[-1],
    )
    return summaries


def _apply_growth_rates(summaries: list[AnnualSummary]) -> None:
    """Fill growth rates in place, walking the series in year order."""
    summaries.sort(key=lambda s: s.year)
    for previous, current in zip(summaries, summaries[1:]):
        for rate_attr, value_attr in _GROWTH_FIELDS.items():
            rate = calculate_growth_rate(
                getattr(current, value_attr), getattr(previous, value_attr)
            )
            setattr(current, rate_attr, rate)


def summaries_to_frame(summaries: list[AnnualSummary]) -> pd.DataFrame:
    """One-row-per-year DataFrame indexed by year."""
    frame = _to_frame(summaries, AnnualSummary)
    return frame.set_index("year")
