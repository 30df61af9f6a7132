"""Tests for CLI entry point (main.py)."""

from __future__ import annotations

import argparse
import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from workforce_forecast.config import AnalysisConfig
from workforce_forecast.data.contracts import (
    AnalysisResults,
    AnnualSummary,
    ForecastSummary,
)
from workforce_forecast.main import (
    _default_years,
    _parse_args,
    main,
    run_analyze,
    run_lookup,
)
from workforce_forecast.runner import CompanyNotFoundError


# --- Test fixtures ---


def _make_results(with_summaries: bool = True) -> AnalysisResults:
    summaries = []
    if with_summaries:
        summaries = [
            AnnualSummary(
                company_name="삼성전자",
                company_code="00126380",
                year="2023",
                total_employees=120_000,
                avg_salary=120.0,
                revenue=2.5e14,
                operating_profit=6e12,
                net_income=1.5e13,
                total_assets=4.5e14,
            )
        ]
    return AnalysisResults(
        company_name="삼성전자",
        company_code="00126380",
        years=["2023"],
        summaries=summaries,
        prediction=None,
        forecast=ForecastSummary(
            summary="2024 forecast: ...",
            trend="neutral",
            confidence="low",
            key_insights=["Current trend expected to continue"],
        ),
    )


def _analyze_args(tmp_path: Path, **overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {
        "command": "analyze",
        "company": "삼성전자",
        "start_year": 2021,
        "end_year": 2023,
        "output_dir": tmp_path,
        "verbose": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


# --- Argument parsing ---


class TestParseArgs:
    def test_analyze_defaults(self) -> None:
        args = _parse_args(["analyze", "삼성전자"])
        assert args.command == "analyze"
        assert args.company == "삼성전자"
        assert args.start_year is None
        assert args.end_year is None
        assert args.output_dir == Path("output")
        assert args.verbose is False

    def test_analyze_options(self) -> None:
        args = _parse_args([
            "analyze", "카카오",
            "--start-year", "2019",
            "--end-year", "2023",
            "--output-dir", "/tmp/out",
            "-v",
        ])
        assert args.start_year == 2019
        assert args.end_year == 2023
        assert args.output_dir == Path("/tmp/out")
        assert args.verbose is True

    def test_lookup(self) -> None:
        args = _parse_args(["lookup", "네이버", "--static"])
        assert args.command == "lookup"
        assert args.static is True

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args([])

    def test_non_integer_year(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["analyze", "삼성전자", "--start-year", "last"])


class TestDefaultYears:
    def test_explicit_years_kept(self) -> None:
        args = argparse.Namespace(start_year=2018, end_year=2020)
        assert _default_years(args, AnalysisConfig()) == (2018, 2020)

    def test_end_year_defaults_to_last_completed_year(self) -> None:
        args = argparse.Namespace(start_year=None, end_year=None)
        last = datetime.date.today().year - 1
        assert _default_years(args, AnalysisConfig()) == (last - 2, last)

    def test_start_year_from_range(self) -> None:
        args = argparse.Namespace(start_year=None, end_year=2023)
        config = AnalysisConfig(default_year_range=5)
        assert _default_years(args, config) == (2019, 2023)


# --- analyze command ---


class TestRunAnalyze:
    def test_missing_api_key(self, tmp_path: Path) -> None:
        with patch(
            "workforce_forecast.main.auto_select_client",
            side_effect=ValueError("DART_API_KEY is not set"),
        ), patch("workforce_forecast.main.run_analysis") as mock_run:
            assert run_analyze(_analyze_args(tmp_path)) == 1
        mock_run.assert_not_called()

    def test_success_exports(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("workforce_forecast.main.auto_select_client"), patch(
            "workforce_forecast.main.auto_select_resolver"
        ), patch(
            "workforce_forecast.main.run_analysis", return_value=_make_results()
        ) as mock_run:
            assert run_analyze(_analyze_args(tmp_path)) == 0

        args = mock_run.call_args[0]
        assert args[:3] == ("삼성전자", 2021, 2023)
        assert (tmp_path / "annual_summaries.csv").exists()
        assert (tmp_path / "forecast.json").exists()

        out = capsys.readouterr().out
        assert "삼성전자 (00126380)" in out
        assert "Current trend expected to continue" in out
        assert "Confidence: low" in out

    def test_unknown_company(self, tmp_path: Path) -> None:
        with patch("workforce_forecast.main.auto_select_client"), patch(
            "workforce_forecast.main.auto_select_resolver"
        ), patch(
            "workforce_forecast.main.run_analysis",
            side_effect=CompanyNotFoundError("No company found for 'x'."),
        ):
            assert run_analyze(_analyze_args(tmp_path)) == 1

    def test_invalid_range(self, tmp_path: Path) -> None:
        with patch("workforce_forecast.main.auto_select_client"), patch(
            "workforce_forecast.main.auto_select_resolver"
        ):
            code = run_analyze(_analyze_args(tmp_path, start_year=2000, end_year=2023))
        assert code == 1

    def test_no_data_not_exported(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        with patch("workforce_forecast.main.auto_select_client"), patch(
            "workforce_forecast.main.auto_select_resolver"
        ), patch(
            "workforce_forecast.main.run_analysis",
            return_value=_make_results(with_summaries=False),
        ):
            assert run_analyze(_analyze_args(tmp_path, output_dir=out_dir)) == 1
        assert not out_dir.exists()


# --- lookup command ---


class TestRunLookup:
    def test_static(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(company="삼성전자", static=True)
        assert run_lookup(args) == 0
        assert capsys.readouterr().out.strip() == "00126380"

    def test_static_unknown(self) -> None:
        args = argparse.Namespace(company="없는회사", static=True)
        assert run_lookup(args) == 1

    def test_falls_back_to_static_without_key(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        args = argparse.Namespace(company="카카오", static=False)
        with patch.dict("os.environ", {}, clear=True):
            assert run_lookup(args) == 0
        assert capsys.readouterr().out.strip() == "00356370"

    def test_uses_index_resolver_with_key(self) -> None:
        resolver = MagicMock()
        resolver.resolve.return_value = "01234567"
        args = argparse.Namespace(company="테스트", static=False)
        with patch("workforce_forecast.main.auto_select_client") as mock_client, patch(
            "workforce_forecast.main.auto_select_resolver", return_value=resolver
        ) as mock_select:
            assert run_lookup(args) == 0
        assert mock_select.call_args[0][0] is mock_client.return_value


# --- main ---


class TestMain:
    def test_exit_code_propagated(self) -> None:
        with patch("workforce_forecast.main.run_lookup", return_value=1):
            with pytest.raises(SystemExit) as exc:
                main(["lookup", "없는회사", "--static"])
        assert exc.value.code == 1

    def test_success_does_not_exit(self) -> None:
        with patch("workforce_forecast.main.run_lookup", return_value=0) as mock_lookup:
            main(["lookup", "삼성전자", "--static"])
        mock_lookup.assert_called_once()


class TestHelpText:
    def test_start_year_default_described_as_window(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["analyze", "--help"])
        out = "".join(capsys.readouterr().out.split())
        assert "three-yearwindowendingatendyear" in out
