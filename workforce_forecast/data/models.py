"""Data models for disclosure records.

Raw records mirror one row of a DART Open API response with string-valued
fields; extracted records carry typed values for the series builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Field mappings: DART API keys → record attributes
_EMPLOYEE_FIELDS = {
    "fo_bbm": "segment",
    "sexdstn": "gender",
    "rgllbr_co": "regular_count",
    "cnttk_co": "contract_count",
    "sm": "total_count",
    "avrg_cnwk_sdytrn": "avg_tenure",
    "fyer_salary_totamt": "total_payroll",
    "jan_salary_am": "per_capita_payroll",
    "rm": "note",
}

_FINANCIAL_FIELDS = {
    "account_id": "account_id",
    "account_nm": "account_name",
    "fs_div": "fs_div",
    "sj_div": "sj_div",
    "thstrm_nm": "current_label",
    "thstrm_amount": "current_amount",
    "frmtrm_nm": "prior_label",
    "frmtrm_amount": "prior_amount",
    "bfefrmtrm_nm": "prior_prior_label",
    "bfefrmtrm_amount": "prior_prior_amount",
    "ord": "ord",
}


def _pick(row: dict[str, Any], mapping: dict[str, str]) -> dict[str, str | None]:
    """Select mapped keys from an API row, coercing present values to str."""
    picked: dict[str, str | None] = {}
    for api_key, attr in mapping.items():
        value = row.get(api_key)
        picked[attr] = None if value is None else str(value)
    return picked


@dataclass
class RawEmployeeRecord:
    """One workforce-status row as disclosed (empSttus)."""

    segment: str | None = None
    gender: str | None = None
    regular_count: str | None = None
    contract_count: str | None = None
    total_count: str | None = None
    avg_tenure: str | None = None
    total_payroll: str | None = None
    per_capita_payroll: str | None = None
    note: str | None = None

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> RawEmployeeRecord:
        return cls(**_pick(row, _EMPLOYEE_FIELDS))


@dataclass
class RawFinancialRecord:
    """One key-account line as disclosed (fnlttSinglAcnt)."""

    account_id: str | None = None
    account_name: str | None = None
    fs_div: str | None = None
    sj_div: str | None = None
    current_label: str | None = None
    current_amount: str | None = None
    prior_label: str | None = None
    prior_amount: str | None = None
    prior_prior_label: str | None = None
    prior_prior_amount: str | None = None
    ord: str | None = None

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> RawFinancialRecord:
        return cls(**_pick(row, _FINANCIAL_FIELDS))


@dataclass
class FetchResult(Generic[T]):
    """Outcome of one remote call.

    A failed call (success=False) is treated downstream as zero records
    for that year, never as a fatal error.
    """

    success: bool
    message: str = ""
    records: list[T] = field(default_factory=list)


@dataclass
class EmployeeRecord:
    """Extracted workforce row for one year.

    Attributes:
        year: Business year label (four digits).
        employment_type: Department or segment label.
        gender: Gender label.
        employee_count: Headcount, never negative (0 if unparseable).
        avg_service_years: Average tenure in years.
        avg_salary: Average salary in millions of KRW.
        total_payroll: Annual total payroll in KRW as reported.
        note: Free-text remark.
    """

    year: str
    employment_type: str
    gender: str
    employee_count: int
    avg_service_years: float | None
    avg_salary: float | None
    total_payroll: float | None
    note: str


@dataclass
class FinancialRecord:
    """Extracted key-account row for one year."""

    year: str
    account_id: str
    account_name: str
    fs_div: str
    sj_div: str
    current_label: str
    current_amount: float | None
    prior_label: str
    prior_amount: float | None
    prior_prior_label: str
    prior_prior_amount: float | None
    ord: str
