"""In-memory project: works, their sections and the dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .dates import HolidayCalendar
from .exceptions import MissingReferenceError
from .graph import DependencyGraph
from .models import ProjectScope, ScheduleDates, WorkRef
from .sections import SectionedWork


def _default_works() -> dict[int, SectionedWork]:
    return {}


def _default_names() -> dict[int, str]:
    return {}


def _default_holidays() -> list[date]:
    return []


@dataclass
class Project:
    """A loaded project.

    Implements both ``ScheduleDatesProvider`` and ``SectionProgressProvider``
    for its own scope, so it can back a ``DependencyService`` directly.
    """

    id: int
    name: str = ""
    works: dict[int, SectionedWork] = field(default_factory=_default_works)
    work_names: dict[int, str] = field(default_factory=_default_names)
    holidays: list[date] = field(default_factory=_default_holidays)
    graph: DependencyGraph = field(default_factory=DependencyGraph)

    @property
    def scope(self) -> ProjectScope:
        return ProjectScope(project_id=self.id)

    def get_work(self, work_id: int) -> SectionedWork:
        """Get a work by id.

        Raises:
            MissingReferenceError: If the work does not exist
        """
        work = self.works.get(work_id)
        if work is None:
            raise MissingReferenceError(f"Unknown work: {work_id}")
        return work

    def calendar(self, weekend_days: list[int] | None = None) -> HolidayCalendar:
        return HolidayCalendar.from_dates(self.holidays, weekend_days)

    def all_refs(self) -> list[WorkRef]:
        """Every schedulable unit: whole works plus sections of multi-section works."""
        refs: list[WorkRef] = []
        for work_id in sorted(self.works):
            work = self.works[work_id]
            refs.append(WorkRef(work_id))
            if work.is_multi_section:
                refs.extend(work.refs)
        return refs

    # === ScheduleDatesProvider ===

    def has_work(self, scope: ProjectScope, ref: WorkRef) -> bool:
        self._check_scope(scope)
        work = self.works.get(ref.work_id)
        return work is not None and work.has_ref(ref)

    def dates_for(self, scope: ProjectScope, ref: WorkRef) -> ScheduleDates | None:
        self._check_scope(scope)
        work = self.works.get(ref.work_id)
        if work is None or not work.has_ref(ref):
            return None
        return work.dates_for(ref)

    # === SectionProgressProvider ===

    def sections_count(self, scope: ProjectScope, work_id: int) -> int:
        self._check_scope(scope)
        return self.get_work(work_id).sections_count

    def section_progress(self, scope: ProjectScope, work_id: int) -> list[int]:
        self._check_scope(scope)
        work = self.get_work(work_id)
        if not work.is_multi_section:
            return [work.progress]
        return [work.section_progress.get(n, 0) for n in range(1, work.sections_count + 1)]

    def _check_scope(self, scope: ProjectScope) -> None:
        if scope.project_id != self.id:
            raise MissingReferenceError(f"Unknown project: {scope.project_id}")
