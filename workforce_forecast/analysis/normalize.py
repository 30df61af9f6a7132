"""Parsing of string-encoded disclosure amounts."""

from __future__ import annotations

import math
import re

_STRIP = re.compile(r"[,\s]")
# ASCII decimal only: rejects underscores and non-ASCII digits float() allows
_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_amount(raw: str | None) -> float | None:
    """Parse a locale-formatted amount such as ``"1,234,567"``.

    Missing, ``"-"`` and non-numeric input all become None, which keeps
    them distinct from a genuine zero.

    Args:
        raw: String value from a disclosure row.

    Returns:
        Parsed float, or None.
    """
    if raw is None:
        return None

    cleaned = _STRIP.sub("", str(raw))
    if not _NUMBER.fullmatch(cleaned):
        return None

    value = float(cleaned)

    if not math.isfinite(value):
        return None
    return value
