"""Derive an upload's report date from its filename."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Callable

# Checked in order; the first calendar-valid match wins.
FILENAME_DATE_PATTERNS = [
    re.compile(r"(\d{4})-(\d{2})-(\d{2})"),
    re.compile(r"(\d{4})(\d{2})(\d{2})"),
    re.compile(r"(\d{4})\.(\d{2})\.(\d{2})"),
    re.compile(r"(\d{4})_(\d{2})_(\d{2})"),
]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def date_from_filename(filename: str) -> date | None:
    for pattern in FILENAME_DATE_PATTERNS:
        for match in pattern.finditer(filename):
            year, month, day = (int(g) for g in match.groups())
            try:
                return date(year, month, day)
            except ValueError:
                continue
    return None


def get_report_date(filename: str, today: Callable[[], date] = utc_today) -> str:
    """``foreclosure_data_20240115.xlsx`` -> ``"2024-01-15"``; no date -> UTC today."""
    found = date_from_filename(filename)
    return (found or today()).isoformat()
