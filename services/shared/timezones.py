"""Timezone helpers: every shop sees "today" and "now" on its own wall clock."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/Argentina/Cordoba"


def resolve_zone(tz_name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def is_valid_timezone(tz_name: str) -> bool:
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def ensure_timezone(dt: datetime, tz_name: Optional[str]) -> datetime:
    """Localize ``dt`` to ``tz_name``; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(resolve_zone(tz_name))


def local_now(tz_name: Optional[str], now: Optional[datetime] = None) -> datetime:
    return ensure_timezone(now or datetime.now(timezone.utc), tz_name)


def local_today(tz_name: Optional[str], now: Optional[datetime] = None) -> date:
    return local_now(tz_name, now).date()
