"""Field cleaners: convert raw cell text into typed values.

Every cleaner returns ``(value, issue)``. ``issue`` is a human-readable note
when the input was missing or could not be interpreted; cleaners never raise
on bad data so a single bad cell cannot abort its row.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

import phonenumbers
from dateutil import parser as dateutil_parser
from phonenumbers import NumberParseException

from loanflow.models.schema_mapping import DataType

Issue = Optional[str]

_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_INTEGER = re.compile(r"^[+-]?\d+(\.0*)?$")
_SERIAL = re.compile(r"^\d+(\.\d+)?$")
_CURRENCY_SYMBOLS = ("$", "€", "£", "¥")

# 1900 date system; 1899-12-30 absorbs the phantom 1900-02-29.
EXCEL_EPOCH = date(1899, 12, 30)
MAX_EXCEL_SERIAL = 2958465  # 9999-12-31


def _text(raw: object) -> str:
    return "" if raw is None else str(raw).strip()


def _to_decimal(text: str) -> Decimal | None:
    if not _NUMBER.match(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def clean_text(raw: object, label: str = "") -> tuple[Optional[str], Issue]:
    text = _text(raw)
    return (text or None), None


def clean_currency(raw: object, label: str = "") -> tuple[Optional[Decimal], Issue]:
    """``"$(1,234.56)"`` -> ``Decimal("-1234.56")``; ``"N/A"`` -> ``None`` + note."""
    text = _text(raw)
    if not text:
        return None, f"{label}: missing currency value"

    stripped = text
    for symbol in _CURRENCY_SYMBOLS:
        stripped = stripped.replace(symbol, "")
    stripped = stripped.replace(",", "").replace(" ", "")

    negative = False
    if stripped.startswith("-(") and stripped.endswith(")"):
        negative, stripped = True, stripped[2:-1]
    elif stripped.startswith("(") and stripped.endswith(")"):
        negative, stripped = True, stripped[1:-1]
    if stripped.endswith("-"):
        # Trailing-minus convention used by some servicing exports.
        negative, stripped = True, stripped[:-1]

    value = _to_decimal(stripped)
    if value is None:
        return None, f"{label}: unparseable currency {text!r}"
    return (-abs(value) if negative else value), None


def clean_percentage(raw: object, label: str = "") -> tuple[Optional[Decimal], Issue]:
    """``"5.25%"`` -> ``Decimal("5.25")``; values are taken as already scaled."""
    text = _text(raw)
    if not text:
        return None, f"{label}: missing percentage value"
    value = _to_decimal(text.replace("%", "").replace(",", "").replace(" ", ""))
    if value is None:
        return None, f"{label}: unparseable percentage {text!r}"
    return value, None


def parse_date_text(text: str) -> date | None:
    """Spreadsheet serial numbers first, then dateutil for textual dates."""
    if _SERIAL.match(text):
        serial = float(text)
        if 1 <= serial <= MAX_EXCEL_SERIAL:
            return EXCEL_EPOCH + timedelta(days=int(serial))
    try:
        return dateutil_parser.parse(text).date()
    except (ValueError, OverflowError):
        # ParserError subclasses ValueError.
        return None


def clean_date(raw: object, label: str = "") -> tuple[Optional[date], Issue]:
    if isinstance(raw, datetime):
        return raw.date(), None
    if isinstance(raw, date):
        return raw, None
    text = _text(raw)
    if not text:
        return None, None
    parsed = parse_date_text(text)
    if parsed is None:
        return None, f"{label}: invalid date {text!r}"
    return parsed, None


def clean_integer(raw: object, label: str = "") -> tuple[Optional[int], Issue]:
    text = _text(raw).replace(",", "")
    if not text:
        return None, None
    if not _INTEGER.match(text):
        return None, f"{label}: invalid integer {_text(raw)!r}"
    return int(Decimal(text)), None


def clean_phone(raw: object, label: str = "", region: str = "US") -> tuple[Optional[str], Issue]:
    """Normalize to E.164, e.g. ``"(555) 201-4477"`` -> ``"+15552014477"``."""
    text = _text(raw)
    if not text:
        return None, None
    try:
        number = phonenumbers.parse(text, region)
    except NumberParseException:
        return None, f"{label}: invalid phone number {text!r}"
    if not phonenumbers.is_valid_number(number):
        return None, f"{label}: invalid phone number {text!r}"
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164), None


CLEANERS: dict[DataType, Callable[..., tuple[object, Issue]]] = {
    DataType.TEXT: clean_text,
    DataType.CURRENCY: clean_currency,
    DataType.PERCENTAGE: clean_percentage,
    DataType.DATE: clean_date,
    DataType.INTEGER: clean_integer,
    DataType.PHONE: clean_phone,
}
