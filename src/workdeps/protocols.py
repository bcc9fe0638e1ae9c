"""Collaborator contracts.

The dependency engine reads dates and progress owned by the work-management
subsystem through these protocols; it never stores them itself.
"""

from typing import Protocol

from .models import ProjectScope, ScheduleDates, WorkRef


class ScheduleDatesProvider(Protocol):
    """Supplies the current dates of works and sections."""

    def has_work(self, scope: ProjectScope, ref: WorkRef) -> bool:
        """Whether the work (or section) exists in the project."""
        ...

    def dates_for(self, scope: ProjectScope, ref: WorkRef) -> ScheduleDates | None:
        """Current dates of a work or section, or None if unknown."""
        ...


class SectionProgressProvider(Protocol):
    """Supplies per-section completion percentages."""

    def sections_count(self, scope: ProjectScope, work_id: int) -> int:
        """Number of sections of a work (1 for an undivided work)."""
        ...

    def section_progress(self, scope: ProjectScope, work_id: int) -> list[int]:
        """Completion percentage of every section, in section order."""
        ...
