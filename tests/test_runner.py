"""Tests for workforce_forecast.runner."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from workforce_forecast.config import AnalysisConfig, DartConfig
from workforce_forecast.data.dart import DartClient
from workforce_forecast.data.models import (
    FetchResult,
    RawEmployeeRecord,
    RawFinancialRecord,
)
from workforce_forecast.metrics.forecast import INSUFFICIENT_DATA_SUMMARY
from workforce_forecast.runner import (
    CompanyNotFoundError,
    collect_records,
    run_analysis,
    validate_request,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_HEADCOUNT = {"2021": "100", "2022": "110", "2023": "121"}
_REVENUE = {
    "2021": "1,000,000,000,000",
    "2022": "1,100,000,000,000",
    "2023": "1,200,000,000,000",
}


def _workforce(corp_code: str, year: str) -> FetchResult[RawEmployeeRecord]:
    if year not in _HEADCOUNT:
        return FetchResult(success=False, message="조회된 데이타가 없습니다.")
    return FetchResult(
        success=True,
        message="정상",
        records=[RawEmployeeRecord(total_count=_HEADCOUNT[year])],
    )


def _financials(corp_code: str, year: str) -> FetchResult[RawFinancialRecord]:
    if year not in _REVENUE:
        return FetchResult(success=False, message="조회된 데이타가 없습니다.")
    return FetchResult(
        success=True,
        message="정상",
        records=[
            RawFinancialRecord(
                account_name="매출액", fs_div="CFS", current_amount=_REVENUE[year]
            ),
            RawFinancialRecord(
                account_name="영업이익", fs_div="CFS", current_amount="100,000,000,000"
            ),
        ],
    )


def _client() -> MagicMock:
    client = MagicMock()
    client.fetch_workforce_records.side_effect = _workforce
    client.fetch_financial_records.side_effect = _financials
    return client


def _resolver(code: str | None = "00126380") -> MagicMock:
    resolver = MagicMock()
    resolver.resolve.return_value = code
    return resolver


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidateRequest:
    def test_valid(self) -> None:
        validate_request("삼성전자", 2021, 2023, AnalysisConfig())

    def test_single_year(self) -> None:
        validate_request("삼성전자", 2023, 2023, AnalysisConfig())

    def test_blank_name(self) -> None:
        with pytest.raises(ValueError, match="Company name"):
            validate_request("  ", 2021, 2023, AnalysisConfig())

    def test_reversed_range(self) -> None:
        with pytest.raises(ValueError, match="must not be after"):
            validate_request("삼성전자", 2024, 2023, AnalysisConfig())

    def test_maximum_span_allowed(self) -> None:
        validate_request("삼성전자", 2013, 2023, AnalysisConfig())

    def test_span_too_wide(self) -> None:
        with pytest.raises(ValueError, match="maximum span"):
            validate_request("삼성전자", 2012, 2023, AnalysisConfig())

    def test_custom_span(self) -> None:
        with pytest.raises(ValueError):
            validate_request("삼성전자", 2021, 2023, AnalysisConfig(max_year_span=1))


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class TestCollectRecords:
    def test_calls_each_year(self) -> None:
        client = _client()
        collect_records(client, "00126380", ["2021", "2022", "2023"])
        assert client.fetch_workforce_records.call_count == 3
        assert client.fetch_financial_records.call_count == 3
        client.fetch_workforce_records.assert_any_call("00126380", "2022")

    def test_failed_year_skipped(self) -> None:
        employees, financials = collect_records(
            _client(), "00126380", ["2020", "2021"]
        )
        assert [r.year for r in employees] == ["2021"]
        assert {r.year for r in financials} == {"2021"}

    def test_no_years(self) -> None:
        assert collect_records(_client(), "00126380", []) == ([], [])


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class TestRunAnalysis:
    def test_full_pipeline(self) -> None:
        results = run_analysis("삼성전자", 2021, 2023, _client(), _resolver())

        assert results.company_name == "삼성전자"
        assert results.company_code == "00126380"
        assert results.years == ["2021", "2022", "2023"]
        assert [s.year for s in results.summaries] == ["2021", "2022", "2023"]
        assert results.summaries[2].total_employees == 121
        assert results.summaries[2].revenue == 1.2e12

        assert results.prediction is not None
        assert results.prediction.year == "2024"
        assert results.prediction.employee_trend == "growth"
        assert results.prediction.confidence == "medium"
        assert results.forecast.trend == "positive"

    def test_name_trimmed_before_resolving(self) -> None:
        resolver = _resolver()
        results = run_analysis(" 삼성전자 ", 2021, 2023, _client(), resolver)
        resolver.resolve.assert_called_once_with("삼성전자")
        assert results.company_name == "삼성전자"

    def test_partial_years(self) -> None:
        results = run_analysis("삼성전자", 2019, 2022, _client(), _resolver())
        assert results.years == ["2019", "2020", "2021", "2022"]
        assert [s.year for s in results.summaries] == ["2021", "2022"]
        assert results.prediction is not None
        assert results.prediction.year == "2023"
        assert results.prediction.confidence == "low"

    def test_no_data(self) -> None:
        results = run_analysis("삼성전자", 2010, 2012, _client(), _resolver())
        assert results.summaries == []
        assert results.prediction is None
        assert results.forecast.summary == INSUFFICIENT_DATA_SUMMARY
        assert results.forecast.trend == "neutral"
        assert results.forecast.confidence == "low"

    def test_unknown_company(self) -> None:
        client = _client()
        with pytest.raises(CompanyNotFoundError, match="No company found"):
            run_analysis("없는회사", 2021, 2023, client, _resolver(None))
        client.fetch_workforce_records.assert_not_called()

    def test_invalid_request_checked_first(self) -> None:
        resolver = _resolver()
        with pytest.raises(ValueError):
            run_analysis("삼성전자", 2023, 2021, _client(), resolver)
        resolver.resolve.assert_not_called()

    def test_forecast_config_applied(self) -> None:
        config = AnalysisConfig()
        config.forecast.medium_confidence_years = 2
        config.forecast.high_confidence_years = 3
        results = run_analysis("삼성전자", 2021, 2023, _client(), _resolver(), config)
        assert results.prediction is not None
        assert results.prediction.confidence == "high"


class TestRunAnalysisWithClient:
    """End to end through DartClient with a mocked HTTP layer."""

    @staticmethod
    def _get(url: str, params: dict[str, str], timeout: float) -> MagicMock:
        year = params["bsns_year"]
        response = MagicMock()
        response.status_code = 200
        if year == "2022":
            response.json.return_value = {"status": "000", "message": "정상", "list": ["junk"]}
        elif url.endswith("/empSttus.json"):
            response.json.return_value = {
                "status": "000",
                "message": "정상",
                "list": [{"sm": _HEADCOUNT[year]}],
            }
        else:
            response.json.return_value = {
                "status": "000",
                "message": "정상",
                "list": [{"account_nm": "매출액", "fs_div": "CFS", "thstrm_amount": _REVENUE[year]}],
            }
        return response

    def test_malformed_year_skipped(self) -> None:
        client = DartClient("test-key", DartConfig(max_requests_per_second=1000.0))
        with patch("workforce_forecast.data.dart.requests.get", side_effect=self._get):
            results = run_analysis("삼성전자", 2021, 2023, client, _resolver())

        assert results.years == ["2021", "2022", "2023"]
        assert [s.year for s in results.summaries] == ["2021", "2023"]
        assert results.summaries[1].total_employees == 121
        assert results.prediction is not None
        assert results.prediction.year == "2024"
