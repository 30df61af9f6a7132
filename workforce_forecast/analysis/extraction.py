"""Record extraction: raw disclosure rows to typed per-year records."""

from __future__ import annotations

import logging

from workforce_forecast.analysis.normalize import parse_amount
from workforce_forecast.config import SALARY_UNIT
from workforce_forecast.data.models import (
    EmployeeRecord,
    FetchResult,
    FinancialRecord,
    RawEmployeeRecord,
    RawFinancialRecord,
)

logger = logging.getLogger(__name__)

# Key account names as disclosed (matched by substring, case-sensitive)
KEY_ACCOUNTS: dict[str, str] = {
    "revenue": "매출액",
    "operating_profit": "영업이익",
    "net_income": "당기순이익",
    "total_assets": "자산총계",
    "total_liabilities": "부채총계",
    "total_equity": "자본총계",
    "current_assets": "유동자산",
    "non_current_assets": "비유동자산",
    "current_liabilities": "유동부채",
    "non_current_liabilities": "비유동부채",
}


def _label(value: str | None) -> str:
    return value.strip() if value else ""


def is_key_account(account_name: str) -> bool:
    """True if the account name contains one of the key account terms."""
    return any(term in account_name for term in KEY_ACCOUNTS.values())


def extract_employee_records(
    result: FetchResult[RawEmployeeRecord], year: str
) -> list[EmployeeRecord]:
    """Map one year's workforce rows to EmployeeRecords.

    Headcount comes from the total column, falling back to the regular
    employee column when the total is missing or zero. Average salary
    prefers the per-capita column and otherwise divides total payroll by
    headcount; both are scaled to millions of KRW.

    Args:
        result: Fetch result for one year.
        year: Business year label.

    Returns:
        Extracted records, empty if the fetch failed or returned no rows.
    """
    if not result.success or not result.records:
        return []

    records: list[EmployeeRecord] = []
    for raw in result.records:
        count = parse_amount(raw.total_count)
        if not count:
            count = parse_amount(raw.regular_count) or 0.0
        employee_count = max(int(count), 0)

        total_payroll = parse_amount(raw.total_payroll)
        per_capita = parse_amount(raw.per_capita_payroll)

        avg_salary: float | None = None
        if per_capita:
            avg_salary = per_capita / SALARY_UNIT
        elif total_payroll and employee_count > 0:
            avg_salary = total_payroll / employee_count / SALARY_UNIT

        records.append(
            EmployeeRecord(
                year=year,
                employment_type=_label(raw.segment),
                gender=_label(raw.gender),
                employee_count=employee_count,
                avg_service_years=parse_amount(raw.avg_tenure),
                avg_salary=avg_salary,
                total_payroll=total_payroll,
                note=_label(raw.note),
            )
        )

    logger.debug("%s: extracted %d employee records", year, len(records))
    return records


def extract_financial_records(
    result: FetchResult[RawFinancialRecord], year: str
) -> list[FinancialRecord]:
    """Map one year's account lines to FinancialRecords.

    Only lines whose account name contains a key account term survive.

    Args:
        result: Fetch result for one year.
        year: Business year label.

    Returns:
        Extracted records, empty if the fetch failed or returned no rows.
    """
    if not result.success or not result.records:
        return []

    records: list[FinancialRecord] = []
    for raw in result.records:
        account_name = _label(raw.account_name)
        if not is_key_account(account_name):
            continue

        records.append(
            FinancialRecord(
                year=year,
                account_id=raw.account_id or "",
                account_name=account_name,
                fs_div=raw.fs_div or "",
                sj_div=raw.sj_div or "",
                current_label=raw.current_label or "",
                current_amount=parse_amount(raw.current_amount),
                prior_label=raw.prior_label or "",
                prior_amount=parse_amount(raw.prior_amount),
                prior_prior_label=raw.prior_prior_label or "",
                prior_prior_amount=parse_amount(raw.prior_prior_amount),
                ord=raw.ord or "",
            )
        )

    logger.debug(
        "%s: kept %d of %d financial lines",
        year, len(records), len(result.records),
    )
    return records
