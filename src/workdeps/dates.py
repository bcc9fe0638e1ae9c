"""Date arithmetic helpers.

Calendar-day differences, day-of-week classification and holiday-aware
workday counting. All functions are pure; the non-working-day calendar is
passed in by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta

# ISO weekday numbers (Monday=1 .. Sunday=7)
SATURDAY = 6
SUNDAY = 7
DEFAULT_WEEKEND_DAYS = frozenset({SATURDAY, SUNDAY})


def _default_holidays() -> frozenset[date]:
    return frozenset()


@dataclass(frozen=True)
class HolidayCalendar:
    """Non-working days of a project: weekend weekdays plus explicit holidays."""

    holidays: frozenset[date] = field(default_factory=_default_holidays)
    weekend_days: frozenset[int] = DEFAULT_WEEKEND_DAYS

    @classmethod
    def from_dates(
        cls, holidays: Iterable[date], weekend_days: Iterable[int] | None = None
    ) -> HolidayCalendar:
        """Build a calendar from any iterable of holiday dates."""
        weekend = frozenset(weekend_days) if weekend_days is not None else DEFAULT_WEEKEND_DAYS
        return cls(holidays=frozenset(holidays), weekend_days=weekend)

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays

    def is_workday(self, day: date) -> bool:
        return not is_weekend(day, self.weekend_days) and day not in self.holidays


def parse_date(date_val: str | date | None) -> date | None:
    """Parse an ISO date string or pass through a date object.

    Returns None for missing or unparseable values.
    """
    if date_val is None:
        return None
    if isinstance(date_val, date):
        return date_val
    try:
        return date.fromisoformat(date_val.strip())
    except (ValueError, AttributeError):
        return None


def calendar_days_between(start: date, end: date) -> int:
    """Signed number of calendar days from start to end."""
    return (end - start).days


def add_days(day: date, days: int) -> date:
    """Shift a date by a signed number of calendar days."""
    return day + timedelta(days=days)


def day_of_week(day: date) -> int:
    """ISO day of week (Monday=1 .. Sunday=7)."""
    return day.isoweekday()


def is_weekend(day: date, weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS) -> bool:
    """Check whether a date falls on a weekend day."""
    return day_of_week(day) in set(weekend_days)


def is_workday(day: date, calendar: HolidayCalendar | None = None) -> bool:
    """Check whether a date is a working day under the given calendar."""
    return (calendar or HolidayCalendar()).is_workday(day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive (nothing if end < start)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_workdays(start: date, end: date, calendar: HolidayCalendar | None = None) -> int:
    """Count working days in the inclusive range [start, end].

    Weekends and holidays are excluded. Returns 0 when end is before start.
    """
    cal = calendar or HolidayCalendar()
    return sum(1 for day in iter_days(start, end) if cal.is_workday(day))


def count_non_workdays(start: date, end: date, calendar: HolidayCalendar | None = None) -> int:
    """Count weekend days and holidays in the inclusive range [start, end]."""
    if end < start:
        return 0
    return calendar_days_between(start, end) + 1 - count_workdays(start, end, calendar)


def next_workday(day: date, calendar: HolidayCalendar | None = None) -> date:
    """Return ``day`` if it is a working day, otherwise the first working day after it."""
    cal = calendar or HolidayCalendar()
    if len(cal.weekend_days) >= 7:  # noqa: PLR2004 - every weekday is a weekend day
        raise ValueError("Calendar has no working weekdays")
    current = day
    while not cal.is_workday(current):
        current += timedelta(days=1)
    return current
