"""Multi-section works.

A work with ``sections_count > 1`` is split into equally weighted sections
1..N. Each section carries its own dates and may be the source or target of
dependency edges on its own; the graph and evaluator treat sections as
ordinary work references.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .exceptions import InvalidPercentageError, MissingReferenceError
from .models import ScheduleDates, WorkRef

MIN_PERCENT = 0
MAX_PERCENT = 100


def section_refs(work_id: int, sections_count: int) -> list[WorkRef]:
    """References to every schedulable unit of a work.

    A single-section work is addressed as the whole work.
    """
    if sections_count < 1:
        raise ValueError(f"sections_count must be at least 1, got {sections_count}")
    if sections_count == 1:
        return [WorkRef(work_id)]
    return [WorkRef(work_id, n) for n in range(1, sections_count + 1)]


def validate_percent(percent: int) -> int:
    """Ensure a completion percentage lies in [0, 100]."""
    if not MIN_PERCENT <= percent <= MAX_PERCENT:
        raise InvalidPercentageError(f"Progress must be between 0 and 100, got {percent}")
    return percent


def aggregate_section_progress(percentages: Iterable[int]) -> int:
    """Unweighted mean of section completion percentages, rounded to an integer.

    Every section has the same coefficient regardless of its volume. An empty
    input yields 0.
    """
    values = [validate_percent(p) for p in percentages]
    if not values:
        return 0
    # Round half up; built-in round() would round 62.5 down to 62
    return int(sum(values) / len(values) + 0.5)


def _default_dates() -> dict[int, ScheduleDates]:
    return {}


def _default_progress() -> dict[int, int]:
    return {}


@dataclass
class SectionedWork:
    """A work together with its per-section dates and progress."""

    work_id: int
    sections_count: int = 1
    dates: ScheduleDates = field(default_factory=ScheduleDates)
    progress: int = 0
    section_dates: dict[int, ScheduleDates] = field(default_factory=_default_dates)
    section_progress: dict[int, int] = field(default_factory=_default_progress)

    @property
    def is_multi_section(self) -> bool:
        return self.sections_count > 1

    @property
    def refs(self) -> list[WorkRef]:
        return section_refs(self.work_id, self.sections_count)

    def has_ref(self, ref: WorkRef) -> bool:
        """Whether ``ref`` names this work or one of its sections."""
        if ref.work_id != self.work_id:
            return False
        if ref.section is None:
            return True
        # An undivided work is addressed only as the whole work
        return self.is_multi_section and 1 <= ref.section <= self.sections_count

    def dates_for(self, ref: WorkRef) -> ScheduleDates:
        """Dates of the whole work or of one section.

        Raises:
            MissingReferenceError: If the section does not exist
        """
        if not self.has_ref(ref):
            raise MissingReferenceError(f"Work {self.work_id} has no section {ref.section}")
        if ref.section is None:
            return self.dates
        return self.section_dates.get(ref.section, ScheduleDates())

    def set_section_progress(self, section: int, percent: int) -> None:
        """Record a section's percentage; the work-level value is derived on read."""
        if not 1 <= section <= self.sections_count:
            raise MissingReferenceError(f"Work {self.work_id} has no section {section}")
        self.section_progress[section] = validate_percent(percent)

    def completion_percent(self) -> int:
        """Work-level completion.

        For a multi-section work this is the mean of all sections, missing
        sections counting as 0%. Otherwise it is the work's own value.
        """
        if not self.is_multi_section:
            return self.progress
        return aggregate_section_progress(
            self.section_progress.get(n, 0) for n in range(1, self.sections_count + 1)
        )
