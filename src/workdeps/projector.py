"""Disabled-date projection for date-entry surfaces.

Packages an already computed minimum permissible date as a predicate: every
date strictly before the minimum is disabled, a missing minimum disables
nothing. Never re-derives the minimum itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from .dates import iter_days


def is_date_blocked(day: date | datetime, minimum_date: date | None) -> bool:
    """Check whether a date falls before the minimum permissible date.

    Datetimes are compared by their calendar date only.
    """
    if minimum_date is None:
        return False
    if isinstance(day, datetime):
        day = day.date()
    if isinstance(minimum_date, datetime):
        minimum_date = minimum_date.date()
    return day < minimum_date


@dataclass(frozen=True)
class DisabledDates:
    """Predicate over dates: True means the date must be refused."""

    minimum_date: date | None

    def __call__(self, day: date | datetime) -> bool:
        return is_date_blocked(day, self.minimum_date)

    @property
    def disables_anything(self) -> bool:
        return self.minimum_date is not None

    @property
    def last_disabled(self) -> date | None:
        """The latest disabled date, or None if nothing is disabled."""
        if self.minimum_date is None:
            return None
        return date.fromordinal(self.minimum_date.toordinal() - 1)

    def within(self, start: date, end: date) -> list[date]:
        """Disabled dates inside the inclusive window [start, end]."""
        return [day for day in iter_days(start, end) if self(day)]

    def to_dict(self) -> dict[str, str | None]:
        """Serializable form for a date picker (``before`` is exclusive)."""
        return {"before": self.minimum_date.isoformat() if self.minimum_date else None}


def disabled_dates(minimum_date: date | None) -> DisabledDates:
    """Build the disabled-date predicate for a minimum permissible date."""
    return DisabledDates(minimum_date)
