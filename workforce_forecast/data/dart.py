"""DART Open API client.

Fetches workforce status and key financial accounts per business year.
Retries with exponential backoff on 429/5xx status codes and network
errors; requests are spaced by a shared throttle.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any

import requests

from workforce_forecast.config import STATUS_NO_DATA, STATUS_OK, DartConfig
from workforce_forecast.data.models import (
    FetchResult,
    RawEmployeeRecord,
    RawFinancialRecord,
)

logger = logging.getLogger(__name__)

_RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

_EMPLOYEE_ENDPOINT = "empSttus.json"
_FINANCIAL_ENDPOINT = "fnlttSinglAcnt.json"
_CORP_CODE_ENDPOINT = "corpCode.xml"


class RequestThrottle:
    """Enforce a minimum spacing between requests.

    Thread-safe: concurrent callers are serialized on the spacing.

    Args:
        max_requests_per_second: Upper bound on request rate.
    """

    def __init__(self, max_requests_per_second: float) -> None:
        if max_requests_per_second <= 0:
            raise ValueError("max_requests_per_second must be positive")
        self._interval = 1.0 / max_requests_per_second
        self._lock = threading.Lock()
        self._last: float | None = None

    def wait(self) -> None:
        """Block until the next request is allowed."""
        with self._lock:
            now = time.monotonic()
            if self._last is not None:
                remaining = self._interval - (now - self._last)
                if remaining > 0:
                    time.sleep(remaining)
                    now = time.monotonic()
            self._last = now


class DartClient:
    """Client for the DART Open API.

    Args:
        api_key: DART certification key (crtfc_key).
        config: Client configuration.
    """

    def __init__(self, api_key: str, config: DartConfig | None = None) -> None:
        self._api_key = api_key
        self._config = config or DartConfig()
        self._throttle = RequestThrottle(self._config.max_requests_per_second)

    def _get(self, endpoint: str, params: dict[str, str]) -> requests.Response | None:
        """GET with throttling and retry logic.

        Returns:
            Successful response, or None after the final failed attempt.
        """
        url = f"{self._config.base_url}/{endpoint}"
        query = {**params, "crtfc_key": self._api_key}
        max_retries = self._config.max_retries

        for attempt in range(max_retries):
            self._throttle.wait()
            try:
                response = requests.get(
                    url, params=query, timeout=self._config.timeout
                )

                if response.status_code in _RETRY_STATUS_CODES:
                    sleep_time = self._config.backoff_factor * (2**attempt)
                    logger.warning(
                        "DART %s returned %d, retrying in %.1fs "
                        "(attempt %d/%d)",
                        endpoint,
                        response.status_code,
                        sleep_time,
                        attempt + 1,
                        max_retries,
                    )
                    time.sleep(sleep_time)
                    continue

                response.raise_for_status()
                return response

            except requests.RequestException as e:
                if attempt < max_retries - 1:
                    sleep_time = self._config.backoff_factor * (2**attempt)
                    logger.warning(
                        "DART %s request failed: %s. Retrying in %.1fs "
                        "(attempt %d/%d)",
                        endpoint,
                        e,
                        sleep_time,
                        attempt + 1,
                        max_retries,
                    )
                    time.sleep(sleep_time)
                else:
                    logger.error(
                        "DART %s failed after %d attempts: %s",
                        endpoint,
                        max_retries,
                        e,
                    )

        logger.error("DART %s failed after %d attempts", endpoint, max_retries)
        return None

    def _request(self, endpoint: str, params: dict[str, str]) -> dict[str, Any] | None:
        """Fetch a JSON endpoint and log non-success statuses."""
        response = self._get(endpoint, params)
        if response is None:
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.error("DART %s returned invalid JSON: %s", endpoint, e)
            return None
        if not isinstance(data, dict):
            logger.error("DART %s returned unexpected payload", endpoint)
            return None

        status = str(data.get("status", ""))
        message = str(data.get("message", ""))
        if status == STATUS_NO_DATA:
            logger.warning("DART %s: no data (%s)", endpoint, message)
        elif status != STATUS_OK:
            logger.error("DART %s error: %s (status %s)", endpoint, message, status)
        return data

    def _fetch_rows(
        self, endpoint: str, corp_code: str, year: str
    ) -> tuple[bool, str, list[dict[str, Any]]]:
        params = {
            "corp_code": corp_code,
            "bsns_year": year,
            "reprt_code": self._config.report_code,
        }
        data = self._request(endpoint, params)
        if data is None:
            return False, "request failed", []

        success = str(data.get("status", "")) == STATUS_OK
        rows = data.get("list") or []
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            logger.error(
                "DART %s returned malformed rows for %s/%s", endpoint, corp_code, year
            )
            return False, "malformed payload", []
        return success, str(data.get("message", "")), rows

    def fetch_workforce_records(
        self, corp_code: str, year: str
    ) -> FetchResult[RawEmployeeRecord]:
        """Fetch workforce status rows for one business year."""
        success, message, rows = self._fetch_rows(_EMPLOYEE_ENDPOINT, corp_code, year)
        return FetchResult(
            success=success,
            message=message,
            records=[RawEmployeeRecord.from_api(r) for r in rows],
        )

    def fetch_financial_records(
        self, corp_code: str, year: str
    ) -> FetchResult[RawFinancialRecord]:
        """Fetch key financial account rows for one business year."""
        success, message, rows = self._fetch_rows(_FINANCIAL_ENDPOINT, corp_code, year)
        return FetchResult(
            success=success,
            message=message,
            records=[RawFinancialRecord.from_api(r) for r in rows],
        )

    def fetch_corp_code_archive(self) -> bytes | None:
        """Download the zipped corp-code index (corpCode.xml)."""
        response = self._get(_CORP_CODE_ENDPOINT, {})
        if response is None:
            return None
        return response.content


def auto_select_client(config: DartConfig | None = None) -> DartClient:
    """Build a DartClient from the API key in the environment.

    Raises:
        ValueError: If the API key environment variable is not set.
    """
    config = config or DartConfig()
    api_key = os.environ.get(config.api_key_env)
    if not api_key:
        raise ValueError(f"{config.api_key_env} is not set")
    logger.info("Using DART API (%s found)", config.api_key_env)
    return DartClient(api_key=api_key, config=config)
