"""Tests for the disabled-date projection."""

from datetime import datetime

from tests.conftest import day
from workdeps.projector import disabled_dates, is_date_blocked


class TestDisabledDates:
    """Test the date-entry predicate."""

    def test_blocks_strictly_before_minimum(self) -> None:
        """Test day 14 is disabled and day 15 is allowed for minimum day 15."""
        disabled = disabled_dates(day(15))
        assert disabled(day(14))
        assert disabled(day(1))
        assert not disabled(day(15))
        assert not disabled(day(16))

    def test_no_minimum_blocks_nothing(self) -> None:
        """Test an unconstrained work disables no dates."""
        disabled = disabled_dates(None)
        assert not disabled(day(-1000))
        assert not disabled.disables_anything
        assert disabled.last_disabled is None
        assert disabled.to_dict() == {"before": None}

    def test_datetimes_compare_by_date(self) -> None:
        """Test a time of day on the minimum date is allowed."""
        minimum = day(15)
        late_evening = datetime(minimum.year, minimum.month, minimum.day, 23, 59)
        assert not is_date_blocked(late_evening, minimum)
        assert is_date_blocked(datetime(2025, 3, 15, 23, 59), minimum)

    def test_window_and_serialization(self) -> None:
        """Test listing disabled dates in a window."""
        disabled = disabled_dates(day(5))
        assert disabled.within(day(3), day(7)) == [day(3), day(4)]
        assert disabled.last_disabled == day(4)
        assert disabled.to_dict() == {"before": "2025-03-06"}
