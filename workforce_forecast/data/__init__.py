"""Disclosure data access: DART client, corp-code resolution, record models."""

from __future__ import annotations

from workforce_forecast.data.corp_codes import (
    CachedCorpCodeResolver,
    CodeResolver,
    StaticCodeResolver,
    auto_select_resolver,
)
from workforce_forecast.data.dart import DartClient, auto_select_client
from workforce_forecast.data.models import (
    EmployeeRecord,
    FetchResult,
    FinancialRecord,
    RawEmployeeRecord,
    RawFinancialRecord,
)

__all__ = [
    "CachedCorpCodeResolver",
    "CodeResolver",
    "DartClient",
    "EmployeeRecord",
    "FetchResult",
    "FinancialRecord",
    "RawEmployeeRecord",
    "RawFinancialRecord",
    "StaticCodeResolver",
    "auto_select_client",
    "auto_select_resolver",
]
