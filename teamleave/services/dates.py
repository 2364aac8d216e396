"""Calendar-date helpers shared by admission, blocking and capacity checks.

All ranges are closed intervals of calendar dates. Datetimes are reduced to
the team's calendar date before any comparison so that a timestamp just
after midnight never lands on the previous day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from teamleave.config import get_settings
from teamleave.exceptions import InvalidRangeError

if TYPE_CHECKING:
    from collections.abc import Iterator

_ONE_DAY = timedelta(days=1)


def team_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().timezone)


def to_calendar_date(value: date | datetime) -> date:
    """Normalize a date or datetime to a calendar date in the team timezone.

    Naive datetimes are taken to already be team-local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(team_timezone())
        return value.date()
    return value


def team_today() -> date:
    """Today's calendar date in the team timezone."""
    return datetime.now(team_timezone()).date()


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """True iff the closed intervals [a_start, a_end] and [b_start, b_end] intersect."""
    return to_calendar_date(a_start) <= to_calendar_date(b_end) and to_calendar_date(b_start) <= to_calendar_date(
        a_end
    )


def contains(start: date, end: date, day: date) -> bool:
    return overlaps(start, end, day, day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each calendar date from start to end inclusive."""
    start, end = to_calendar_date(start), to_calendar_date(end)
    if start > end:
        raise InvalidRangeError(start, end)
    current = start
    while current <= end:
        yield current
        current += _ONE_DAY


def enumerate_days(start: date, end: date) -> list[date]:
    """Inclusive day-by-day expansion of a range. Raises InvalidRangeError if start > end."""
    return list(iter_days(start, end))


def inclusive_day_count(start: date, end: date) -> int:
    start, end = to_calendar_date(start), to_calendar_date(end)
    if start > end:
        raise InvalidRangeError(start, end)
    return (end - start).days + 1
