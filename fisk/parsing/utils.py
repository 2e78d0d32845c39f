# File: fisk/parsing/utils.py
"""Utility helpers for parsers."""
from __future__ import annotations

import re
from datetime import datetime

_TZ_NO_COLON = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_datetime(value: str) -> datetime:
    """Parse an ``xsd:dateTime`` such as ``2023-05-01T10:00:00+02:00``.

    A trailing ``Z`` and offsets without a colon (``+0200``) are accepted.
    """
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    s = _TZ_NO_COLON.sub(r"\1:\2", s)
    return datetime.fromisoformat(s)


def format_date(value: datetime) -> str:
    """Return the ``YYYY-MM-DD`` form printed on documents."""
    return value.strftime("%Y-%m-%d")
