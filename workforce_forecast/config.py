"""Pipeline configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

# DART response status codes.
STATUS_OK: str = "000"
STATUS_NO_DATA: str = "013"

# Salaries are reported in KRW and displayed in millions of KRW.
SALARY_UNIT: float = 1_000_000

# Financial statement divisions.
CONSOLIDATED: str = "CFS"
STANDALONE: str = "OFS"


@dataclass
class DartConfig:
    """DART Open API client configuration."""

    base_url: str = "https://opendart.fss.or.kr/api"
    api_key_env: str = "DART_API_KEY"
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 2.0

    # 11011 = annual business report (11012 half-year, 11013/11014 quarterly)
    report_code: str = "11011"

    # Throttle between consecutive requests
    max_requests_per_second: float = 2.0


@dataclass
class ResolverConfig:
    """Company-code resolver configuration."""

    cache_ttl_seconds: float = 24 * 60 * 60


@dataclass
class ForecastConfig:
    """Trend fitting and narrative thresholds."""

    # Absolute units per year, applied to raw metric values
    slope_threshold: float = 0.05

    # Assumed annual attrition used to size replacement hiring
    attrition_rate: float = 0.15

    # Confidence by number of historical years
    high_confidence_years: int = 5
    medium_confidence_years: int = 3

    # Insight triggers (absolute predicted growth, percent)
    employee_insight_pct: float = 5.0
    revenue_insight_pct: float = 10.0
    profit_insight_pct: float = 10.0


@dataclass
class AnalysisConfig:
    """Top-level analysis configuration."""

    max_year_span: int = 10
    default_year_range: int = 3

    dart: DartConfig = field(default_factory=DartConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)

    def __post_init__(self) -> None:
        if self.max_year_span < 0:
            raise ValueError(
                f"max_year_span must be non-negative, got {self.max_year_span}"
            )
        if self.default_year_range < 1:
            raise ValueError(
                f"default_year_range must be at least 1, "
                f"got {self.default_year_range}"
            )
        if self.dart.max_requests_per_second <= 0:
            raise ValueError(
                "dart.max_requests_per_second must be positive, "
                f"got {self.dart.max_requests_per_second}"
            )
        if self.dart.max_retries < 1:
            raise ValueError(
                f"dart.max_retries must be at least 1, got {self.dart.max_retries}"
            )
        if not 0.0 <= self.forecast.attrition_rate < 1.0:
            raise ValueError(
                "forecast.attrition_rate must be in [0, 1), "
                f"got {self.forecast.attrition_rate}"
            )
        if self.forecast.high_confidence_years < self.forecast.medium_confidence_years:
            raise ValueError(
                "forecast.high_confidence_years must be >= "
                "forecast.medium_confidence_years"
            )
