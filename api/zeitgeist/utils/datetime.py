"""Datetime helpers for month keys and timezone normalization."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from zeitgeist.core.errors import ValidationError

_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_key(value: datetime) -> str:
    """Format a datetime as a ``YYYY-MM`` key in UTC."""
    value = ensure_utc(value)
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(value: str | None) -> tuple[int, int]:
    """Validate a ``YYYY-MM`` key and return ``(year, month)``."""
    if not value or not _MONTH_KEY_RE.fullmatch(value):
        raise ValidationError("month", "must match YYYY-MM")
    year, month = value.split("-")
    return int(year), int(month)


def month_bounds(value: str) -> tuple[datetime, datetime]:
    """Return the half-open UTC interval ``[start, end)`` covering a month key."""
    year, month = parse_month_key(value)
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def previous_month_key(value: str) -> str:
    """Return the month key immediately before ``value``."""
    year, month = parse_month_key(value)
    if month == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month - 1:02d}"
