from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from telehealth.core import config


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime, treating naive input as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo((name or config.DEFAULT_TIMEZONE).strip())
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo('UTC')


def local_instant(day: date, time_of_day: time, tz: ZoneInfo) -> datetime:
    """Place a wall-clock time on ``day`` in ``tz`` and return it in UTC."""
    wall_clock = datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=tz)
    return wall_clock.astimezone(timezone.utc)


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # Half-open intervals: touching ends do not overlap.
    return start_a < end_b and start_b < end_a


def minutes_between(earlier: datetime, later: datetime) -> float:
    return (as_utc(later) - as_utc(earlier)) / timedelta(minutes=1)


def format_clock(value: datetime) -> str:
    return value.strftime('%I:%M %p').lstrip('0')


def format_day(day: date) -> str:
    return f"{day.strftime('%A, %B')} {day.day}"
