"""Company name → DART corp code resolution.

Provides a CodeResolver protocol with two implementations:
- StaticCodeResolver: Fixed table of major listed companies.
- CachedCorpCodeResolver: Full DART corp-code index, downloaded on first
  miss and held in a process-wide cache with a fixed lifetime.
"""

from __future__ import annotations

import io
import logging
import re
import threading
import time
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass
from typing import Protocol

from workforce_forecast.config import ResolverConfig
from workforce_forecast.data.dart import DartClient

logger = logging.getLogger(__name__)

# Insertion order matters for partial matches: first hit wins.
STATIC_CORP_CODES: dict[str, str] = {
    "삼성전자": "00126380",
    "삼성": "00126380",
    "SK하이닉스": "00164779",
    "SK": "00164779",
    "네이버": "00252450",
    "NAVER": "00252450",
    "카카오": "00356370",
    "Kakao": "00356370",
    "LG전자": "00101412",
    "LG": "00101412",
    "현대자동차": "00164742",
    "현대차": "00164742",
    "현대": "00164742",
    "기아": "00164779",
    "LG디스플레이": "00103054",
    "SK텔레콤": "00181515",
    "KT": "00164529",
    "포스코": "00164869",
    "한화": "00121480",
    "롯데": "00157624",
}

_CORPORATE_MARKERS = re.compile(
    r"\(주\)|㈜|주식회사|\(株\)|\bco\.,?\s*ltd\b\.?|\binc\b\.?|\bcorp\b\.?"
)
_WHITESPACE = re.compile(r"\s+")


class CodeResolver(Protocol):
    """Interface for resolving a company name to a DART corp code."""

    def resolve(self, company_name: str) -> str | None:
        """Return the corp code for a company name, or None if unknown."""
        ...


def normalize_company_name(name: str) -> str:
    """Casefold and strip whitespace and corporate-form markers."""
    lowered = name.casefold()
    stripped = _CORPORATE_MARKERS.sub("", lowered)
    return _WHITESPACE.sub("", stripped)


class StaticCodeResolver:
    """Resolve names against a fixed table.

    Exact match first, then the first entry where either name contains
    the other.
    """

    def __init__(self, table: dict[str, str] | None = None) -> None:
        self._table = dict(STATIC_CORP_CODES if table is None else table)

    def resolve(self, company_name: str) -> str | None:
        name = company_name.strip()
        if not name:
            return None
        if name in self._table:
            return self._table[name]
        for known, code in self._table.items():
            if known in name or name in known:
                return code
        return None


@dataclass(frozen=True)
class CorpCodeEntry:
    """One company in the DART corp-code index."""

    corp_code: str
    corp_name: str
    stock_code: str = ""

    @property
    def is_listed(self) -> bool:
        return bool(self.stock_code.strip())


def parse_corp_code_archive(data: bytes) -> list[CorpCodeEntry]:
    """Parse the zipped CORPCODE.xml index.

    Raises:
        ValueError: If the archive or XML cannot be read.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            xml_names = [n for n in zf.namelist() if n.lower().endswith(".xml")]
            if not xml_names:
                raise ValueError("corp-code archive contains no XML file")
            xml_bytes = zf.read(xml_names[0])
    except zipfile.BadZipFile as e:
        raise ValueError(f"invalid corp-code archive: {e}") from e

    try:
        root = ET.fromstring(xml_bytes)
    except ET.ParseError as e:
        raise ValueError(f"invalid corp-code XML: {e}") from e

    entries: list[CorpCodeEntry] = []
    for item in root.iter("list"):
        code = (item.findtext("corp_code") or "").strip()
        name = (item.findtext("corp_name") or "").strip()
        if not code or not name:
            continue
        entries.append(
            CorpCodeEntry(
                corp_code=code,
                corp_name=name,
                stock_code=(item.findtext("stock_code") or "").strip(),
            )
        )
    return entries


@dataclass(frozen=True)
class _IndexSnapshot:
    """Immutable index: normalized name → entries, plus load time."""

    by_name: dict[str, tuple[CorpCodeEntry, ...]]
    loaded_at: float


class CorpCodeIndexCache:
    """Process-wide holder for the corp-code index.

    Readers take the current snapshot reference without locking. A rebuild
    produces a complete new snapshot and swaps it in under the lock, so a
    reader never observes a partially built index.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: _IndexSnapshot | None = None

    def get(self, ttl_seconds: float) -> _IndexSnapshot | None:
        """Current snapshot if still fresh, else None."""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        if time.monotonic() - snapshot.loaded_at > ttl_seconds:
            return None
        return snapshot

    def rebuild(
        self, client: DartClient, ttl_seconds: float
    ) -> _IndexSnapshot | None:
        """Download and swap in a fresh index.

        Concurrent callers wait on the lock; whoever arrives after a
        successful rebuild reuses it instead of downloading again.
        """
        with self._lock:
            fresh = self.get(ttl_seconds)
            if fresh is not None:
                return fresh

            data = client.fetch_corp_code_archive()
            if data is None:
                logger.error("Corp-code index download failed")
                return self._snapshot

            try:
                entries = parse_corp_code_archive(data)
            except ValueError as e:
                logger.error("Corp-code index unreadable: %s", e)
                return self._snapshot

            grouped: dict[str, list[CorpCodeEntry]] = {}
            for entry in entries:
                key = normalize_company_name(entry.corp_name)
                grouped.setdefault(key, []).append(entry)

            snapshot = _IndexSnapshot(
                by_name={k: tuple(v) for k, v in grouped.items()},
                loaded_at=time.monotonic(),
            )
            self._snapshot = snapshot
            logger.info("Corp-code index loaded: %d companies", len(entries))
            return snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None


_shared_cache = CorpCodeIndexCache()


def _best(entries: list[CorpCodeEntry]) -> CorpCodeEntry:
    """Listed companies first, then the shortest name."""
    return min(entries, key=lambda e: (not e.is_listed, len(e.corp_name)))


class CachedCorpCodeResolver:
    """Resolve names against the full DART corp-code index.

    Matching is on normalized names: an exact match wins, otherwise the
    best entry whose name contains the query (or vice versa).

    Args:
        client: DART client used to download the index.
        config: Resolver configuration (cache lifetime).
        cache: Index cache; the process-wide cache by default.
        fallback: Resolver used when no index could be loaded; the static
            table by default.
    """

    def __init__(
        self,
        client: DartClient,
        config: ResolverConfig | None = None,
        cache: CorpCodeIndexCache | None = None,
        fallback: CodeResolver | None = None,
    ) -> None:
        self._client = client
        self._config = config or ResolverConfig()
        self._cache = cache if cache is not None else _shared_cache
        self._fallback = fallback if fallback is not None else StaticCodeResolver()

    def _index(self) -> _IndexSnapshot | None:
        ttl = self._config.cache_ttl_seconds
        snapshot = self._cache.get(ttl)
        if snapshot is None:
            snapshot = self._cache.rebuild(self._client, ttl)
        return snapshot

    def resolve(self, company_name: str) -> str | None:
        query = normalize_company_name(company_name)
        if not query:
            return None

        snapshot = self._index()
        if snapshot is None:
            logger.error(
                "Corp-code index unavailable, resolving %r with the fallback resolver",
                company_name,
            )
            return self._fallback.resolve(company_name)

        exact = snapshot.by_name.get(query)
        if exact:
            return _best(list(exact)).corp_code

        candidates = [
            entry
            for name, entries in snapshot.by_name.items()
            if name and (query in name or name in query)
            for entry in entries
        ]
        if not candidates:
            logger.info("No corp code for %r", company_name)
            return None
        return _best(candidates).corp_code


def auto_select_resolver(
    client: DartClient | None, config: ResolverConfig | None = None
) -> CodeResolver:
    """Cached index resolver when a client is available, else static table."""
    if client is not None:
        return CachedCorpCodeResolver(client, config)
    logger.warning("No DART client, falling back to static corp-code table")
    return StaticCodeResolver()
