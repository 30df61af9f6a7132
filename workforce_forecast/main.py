"""CLI entry point for the workforce forecast pipeline."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from pathlib import Path

from workforce_forecast.analysis.annual_series import summaries_to_frame
from workforce_forecast.config import AnalysisConfig
from workforce_forecast.data.contracts import AnalysisResults
from workforce_forecast.data.corp_codes import (
    CodeResolver,
    StaticCodeResolver,
    auto_select_resolver,
)
from workforce_forecast.data.dart import auto_select_client
from workforce_forecast.output.export import export_results
from workforce_forecast.runner import CompanyNotFoundError, run_analysis

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="workforce_forecast",
        description="Company workforce and financial trend forecast from DART filings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze", help="Build the annual series and forecast the next year"
    )
    analyze_parser.add_argument("company", help="Company name (e.g. 삼성전자)")
    analyze_parser.add_argument(
        "--start-year",
        type=int,
        default=None,
        help="First business year (default: three-year window ending at end year)",
    )
    analyze_parser.add_argument(
        "--end-year",
        type=int,
        default=None,
        help="Last business year (default: last completed year)",
    )
    analyze_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Output directory for CSV/JSON exports (default: output/)",
    )
    analyze_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    # lookup command
    lookup_parser = subparsers.add_parser(
        "lookup", help="Resolve a company name to its DART corp code"
    )
    lookup_parser.add_argument("company", help="Company name")
    lookup_parser.add_argument(
        "--static",
        action="store_true",
        help="Use the built-in table instead of the DART corp-code index",
    )
    lookup_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def _default_years(
    args: argparse.Namespace, config: AnalysisConfig
) -> tuple[int, int]:
    """Fill in missing year bounds from the last completed business year."""
    end_year = args.end_year
    if end_year is None:
        end_year = datetime.date.today().year - 1
    start_year = args.start_year
    if start_year is None:
        start_year = end_year - config.default_year_range + 1
    return start_year, end_year


def _print_results(results: AnalysisResults) -> None:
    """Print the annual series and forecast to stdout."""
    frame = summaries_to_frame(results.summaries)
    columns = [
        "total_employees",
        "avg_salary",
        "revenue",
        "operating_profit",
        "employee_growth_rate",
        "revenue_growth_rate",
    ]
    print(f"{results.company_name} ({results.company_code})")
    print(frame[columns].to_string())
    print()
    print(results.forecast.summary)
    for insight in results.forecast.key_insights:
        print(f"  - {insight}")
    print(f"Confidence: {results.forecast.confidence}")


def run_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze command.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Process exit code.
    """
    config = AnalysisConfig()
    start_year, end_year = _default_years(args, config)

    try:
        client = auto_select_client(config.dart)
    except ValueError as e:
        logger.error("%s", e)
        return 1
    resolver = auto_select_resolver(client, config.resolver)

    try:
        results = run_analysis(
            args.company, start_year, end_year, client, resolver, config
        )
    except (ValueError, CompanyNotFoundError) as e:
        logger.error("%s", e)
        return 1

    if not results.summaries:
        logger.error(
            "No data found for %s in %d-%d. Try a different year range.",
            results.company_name, start_year, end_year,
        )
        return 1

    _print_results(results)
    export_results(results, args.output_dir)
    logger.info("Results written to %s", args.output_dir)
    return 0


def run_lookup(args: argparse.Namespace) -> int:
    """Execute the lookup command."""
    config = AnalysisConfig()
    resolver: CodeResolver
    if args.static:
        resolver = StaticCodeResolver()
    else:
        try:
            client = auto_select_client(config.dart)
        except ValueError as e:
            logger.warning("%s", e)
            client = None
        resolver = auto_select_resolver(client, config.resolver)

    code = resolver.resolve(args.company)
    if code is None:
        logger.error("No company found for '%s'", args.company)
        return 1
    print(code)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = _parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "analyze":
        exit_code = run_analyze(args)
    elif args.command == "lookup":
        exit_code = run_lookup(args)
    else:
        logger.error("Unknown command: %s", args.command)
        exit_code = 1

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
