"""Week boundaries and display formatting for schedule dates."""

from datetime import datetime, time, timedelta

import pytz

from ..core.clock import ensure_utc
from ..core.config import settings

WEEK_END_TIME = time(23, 59, 59, 999000)

# Genitive month names, as used in "20 stycznia 2024".
POLISH_MONTHS_GENITIVE = (
    "stycznia",
    "lutego",
    "marca",
    "kwietnia",
    "maja",
    "czerwca",
    "lipca",
    "sierpnia",
    "września",
    "października",
    "listopada",
    "grudnia",
)


def _zone(tz_name: str | None, default: str):
    return pytz.timezone(tz_name or default)


def _local_monday(moment: datetime, zone) -> datetime:
    local = ensure_utc(moment).astimezone(zone)
    return local.date() - timedelta(days=local.weekday())


def week_start(moment: datetime, tz_name: str | None = None) -> datetime:
    """Return Monday 00:00:00.000 of the week containing ``moment``, as UTC."""
    zone = _zone(tz_name, settings.week_timezone)
    monday = _local_monday(moment, zone)
    return zone.localize(datetime.combine(monday, time.min)).astimezone(pytz.utc)


def week_end(moment: datetime, tz_name: str | None = None) -> datetime:
    """Return Sunday 23:59:59.999 of the week containing ``moment``, as UTC."""
    zone = _zone(tz_name, settings.week_timezone)
    sunday = _local_monday(moment, zone) + timedelta(days=6)
    return zone.localize(datetime.combine(sunday, WEEK_END_TIME)).astimezone(pytz.utc)


def shift_week(moment: datetime, weeks: int, tz_name: str | None = None) -> datetime:
    """Return the local Monday 00:00 ``weeks`` weeks away from the week containing ``moment``, as UTC."""
    zone = _zone(tz_name, settings.week_timezone)
    monday = _local_monday(moment, zone) + timedelta(weeks=weeks)
    return zone.localize(datetime.combine(monday, time.min)).astimezone(pytz.utc)


def add_days(moment: datetime, days: int) -> datetime:
    return ensure_utc(moment) + timedelta(days=days)


def day_bounds(moment: datetime, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC bounds of the local day containing ``moment``."""
    zone = _zone(tz_name, settings.week_timezone)
    local_day = ensure_utc(moment).astimezone(zone).date()
    start = zone.localize(datetime.combine(local_day, time.min))
    end = zone.localize(datetime.combine(local_day + timedelta(days=1), time.min))
    return start.astimezone(pytz.utc), end.astimezone(pytz.utc)


def format_date_pl(moment: datetime, tz_name: str | None = None) -> str:
    """Format a date as day, genitive month name and year, e.g. ``20 stycznia 2024``."""
    local = ensure_utc(moment).astimezone(_zone(tz_name, settings.display_timezone))
    return f"{local.day} {POLISH_MONTHS_GENITIVE[local.month - 1]} {local.year}"


def format_time_range(start: datetime, end: datetime, tz_name: str | None = None) -> str:
    """Format a time range as ``HH:MM - HH:MM`` in the display time zone."""
    zone = _zone(tz_name, settings.display_timezone)
    local_start = ensure_utc(start).astimezone(zone)
    local_end = ensure_utc(end).astimezone(zone)
    return f"{local_start:%H:%M} - {local_end:%H:%M}"
