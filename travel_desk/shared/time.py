from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from dateutil import parser as date_parser

from travel_desk.core.errors import BadRequestError

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
PERIODS = ("week", "month", "year")

# Anchor for fields dateutil leaves unset, so "March 2026" does not borrow today's day.
_PARSE_DEFAULT = datetime(2000, 1, 1)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse anything date-like into an aware UTC datetime; naive values are taken as UTC.

    Returns None for empty or unparseable input instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text or not any(char.isdigit() for char in text):
            return None
        try:
            parsed = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            try:
                parsed = date_parser.parse(text, default=_PARSE_DEFAULT)
            except (ValueError, OverflowError):
                return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> Optional[date]:
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def clean_date(value: Any) -> str:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ""


def to_iso_datetime(value: Any) -> Optional[str]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_length(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def resolve_period_window(period: str, today: Optional[date] = None) -> Tuple[date, date]:
    today = today or date.today()
    if period == "week":
        return today - timedelta(days=7), today
    if period == "month":
        return today.replace(day=1), today
    if period == "year":
        return date(today.year, 1, 1), today
    raise BadRequestError("Unsupported period")


def period_label(period: str) -> str:
    if period not in PERIODS:
        raise BadRequestError("Unsupported period")
    return f"this {period}"
