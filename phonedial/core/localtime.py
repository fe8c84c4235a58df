# file: phonedial/core/localtime.py
"""
Local time and business-hours status for a time zone.

`report_local_time` never raises. An unknown or malformed zone produces a
sentinel `LocalTimeInfo` whose text fields read "unavailable".

The wall clock is injectable (`clock=`) so callers and tests can pin "now".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Literal

import pytz

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

BusinessStatus = Literal[
    "weekend", "before business hours", "business hours", "after business hours", "unknown"
]

UNAVAILABLE = "unavailable"

BUSINESS_START_HOUR = 9
BUSINESS_END_HOUR = 18

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_WEEKEND = (5, 6)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class LocalTimeInfo:
    """
    Snapshot of "now" in a time zone.

    Fields:
        timezone: IANA zone identifier as given.
        current_time: Local time, "HH:MM:SS".
        date: Local date, "YYYY-MM-DD".
        utc_offset: e.g. "UTC+8", "UTC-5", "UTC+5:30".
        is_business_hours: True on weekdays between the start and end hour.
        status: One of `BusinessStatus`.
        day_of_week: English day name.
    """

    timezone: str
    current_time: str
    date: str
    utc_offset: str
    is_business_hours: bool
    status: BusinessStatus
    day_of_week: str

    @property
    def available(self) -> bool:
        return self.current_time != UNAVAILABLE

    def to_dict(self) -> dict[str, object]:
        return {
            "timezone": self.timezone,
            "current_time": self.current_time,
            "date": self.date,
            "utc_offset": self.utc_offset,
            "is_business_hours": self.is_business_hours,
            "status": self.status,
            "day_of_week": self.day_of_week,
        }


def format_utc_offset(offset: timedelta | None) -> str:
    """Render a UTC offset as "UTC+8", "UTC-5" or "UTC+5:45"."""

    if offset is None:
        return "UTC+0"
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


def classify_business_hours(
    local: datetime,
    *,
    start_hour: int = BUSINESS_START_HOUR,
    end_hour: int = BUSINESS_END_HOUR,
) -> tuple[bool, BusinessStatus]:
    """
    Classify a local datetime.

    The weekend check comes first and overrides the hour of day.
    """

    if local.weekday() in _WEEKEND:
        return False, "weekend"
    if local.hour < start_hour:
        return False, "before business hours"
    if local.hour < end_hour:
        return True, "business hours"
    return False, "after business hours"


def unavailable_time_info(tz_name: str) -> LocalTimeInfo:
    return LocalTimeInfo(
        timezone=tz_name,
        current_time=UNAVAILABLE,
        date=UNAVAILABLE,
        utc_offset=UNAVAILABLE,
        is_business_hours=False,
        status="unknown",
        day_of_week=UNAVAILABLE,
    )


def report_local_time(
    tz_name: str,
    *,
    clock: Clock | None = None,
    business_start: int = BUSINESS_START_HOUR,
    business_end: int = BUSINESS_END_HOUR,
) -> LocalTimeInfo:
    """
    Compute the current local time and business-hours status in `tz_name`.

    Args:
        tz_name: IANA time zone identifier, e.g. "Asia/Shanghai".
        clock: Returns the current instant (timezone-aware). Defaults to UTC now.
        business_start: First business hour (inclusive).
        business_end: End of business hours (exclusive).
    """

    try:
        zone = pytz.timezone(tz_name)
    except (pytz.UnknownTimeZoneError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Cannot resolve time zone %r: %s", tz_name, exc)
        return unavailable_time_info(tz_name)

    now = (clock or utc_now)()
    if now.tzinfo is None:
        # Naive clocks are taken to be UTC.
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(zone)

    in_hours, status = classify_business_hours(
        local, start_hour=business_start, end_hour=business_end
    )
    return LocalTimeInfo(
        timezone=tz_name,
        current_time=local.strftime("%H:%M:%S"),
        date=local.strftime("%Y-%m-%d"),
        utc_offset=format_utc_offset(local.utcoffset()),
        is_business_hours=in_hours,
        status=status,
        day_of_week=_DAY_NAMES[local.weekday()],
    )
