"""Dependency service: the API surface consumed by the application layer.

This service coordinates:
- DependencyGraph (per project edge store with transactional cycle checks)
- ConstraintEvaluator (minimum permissible dates)
- Disabled-date projection for date pickers
- Section progress aggregation

Dates and progress are read through collaborator protocols. Every call takes
an explicit ``ProjectScope``.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import TYPE_CHECKING

from .config import EngineConfig
from .dates import HolidayCalendar, count_workdays
from .evaluator import ConstraintEvaluator
from .exceptions import MissingReferenceError
from .graph import DependencyGraph
from .logger import get_logger
from .models import (
    ConstraintInput,
    ConstraintResult,
    DependencyEdge,
    DependencyType,
    ProjectScope,
    Side,
    WorkRef,
)
from .projector import DisabledDates, disabled_dates
from .sections import aggregate_section_progress

if TYPE_CHECKING:
    from .protocols import ScheduleDatesProvider, SectionProgressProvider

logger = get_logger()


class DependencyService:
    """Create, query and evaluate dependencies for any number of projects."""

    def __init__(
        self,
        dates_provider: ScheduleDatesProvider,
        progress_provider: SectionProgressProvider | None = None,
        config: EngineConfig | None = None,
    ):
        """Initialize the service.

        Args:
            dates_provider: Source of current work/section dates
            progress_provider: Source of section percentages (needed for
                ``aggregated_section_progress``)
            config: Engine configuration (calendar, evaluator policy)
        """
        self.dates_provider = dates_provider
        self.progress_provider = progress_provider
        self.config = config or EngineConfig()
        self.evaluator = ConstraintEvaluator(self.config.evaluator)
        self._graphs: dict[int, DependencyGraph] = {}
        self._graphs_lock = threading.Lock()

    # === Graph access ===

    def graph_for(self, scope: ProjectScope) -> DependencyGraph:
        """The edge store of a project, created empty on first use."""
        with self._graphs_lock:
            graph = self._graphs.get(scope.project_id)
            if graph is None:
                graph = DependencyGraph()
                self._graphs[scope.project_id] = graph
            return graph

    def attach_graph(self, scope: ProjectScope, graph: DependencyGraph) -> None:
        """Use an existing (e.g. loaded) edge store for a project."""
        with self._graphs_lock:
            self._graphs[scope.project_id] = graph

    # === Mutations ===

    def check_dependency(self, scope: ProjectScope, work: WorkRef, depends_on: WorkRef) -> None:
        """Check whether ``work`` may depend on ``depends_on`` without writing anything.

        Raises:
            MissingReferenceError: If either work does not exist
            SelfReferenceError: If work and depends_on are the same
            DuplicateDependencyError: If the edge already exists
            CycleError: If the edge would close a cycle
        """
        self._require_work(scope, work)
        self._require_work(scope, depends_on)
        self.graph_for(scope).check_edge(work, depends_on)

    def create_dependency(  # noqa: PLR0913 - edge fields plus scope and concurrency guard
        self,
        scope: ProjectScope,
        work: WorkRef,
        depends_on: WorkRef,
        dep_type: DependencyType = DependencyType.FS,
        lag_days: int = 0,
        *,
        expected_version: int | None = None,
    ) -> DependencyEdge:
        """Attach a predecessor to a work.

        Raises:
            MissingReferenceError: If either work does not exist
            SelfReferenceError: If work and depends_on are the same
            DuplicateDependencyError: If the edge already exists
            CycleError: If the edge would close a cycle; nothing is written
            StaleGraphError: If the graph changed since ``expected_version``
        """
        self._require_work(scope, work)
        self._require_work(scope, depends_on)
        return self.graph_for(scope).add_edge(
            work, depends_on, dep_type, lag_days, expected_version=expected_version
        )

    def update_dependency(
        self,
        scope: ProjectScope,
        edge_id: int,
        dep_type: DependencyType | None = None,
        lag_days: int | None = None,
        *,
        expected_version: int | None = None,
    ) -> DependencyEdge:
        """Change the type and/or lag of an existing dependency."""
        return self.graph_for(scope).update_edge(
            edge_id, dep_type, lag_days, expected_version=expected_version
        )

    def delete_dependency(
        self, scope: ProjectScope, edge_id: int, *, expected_version: int | None = None
    ) -> None:
        """Remove a dependency."""
        self.graph_for(scope).remove_edge(edge_id, expected_version=expected_version)

    # === Queries ===

    def list_dependencies(self, scope: ProjectScope) -> list[DependencyEdge]:
        return list(self.graph_for(scope).edges())

    def predecessors_of(self, scope: ProjectScope, work: WorkRef) -> list[DependencyEdge]:
        return list(self.graph_for(scope).predecessors_of(work))

    def successors_of(self, scope: ProjectScope, work: WorkRef) -> list[DependencyEdge]:
        return list(self.graph_for(scope).successors_of(work))

    def constraints_for(self, scope: ProjectScope, work: WorkRef) -> list[ConstraintInput]:
        """Join a work's predecessor edges with each predecessor's current dates."""
        return [
            ConstraintInput(
                edge=edge,
                predecessor_dates=self.dates_provider.dates_for(scope, edge.depends_on),
            )
            for edge in self.graph_for(scope).predecessors_of(work)
        ]

    # === Evaluation ===

    def evaluate(
        self, scope: ProjectScope, work: WorkRef, side: Side = Side.START
    ) -> ConstraintResult:
        """Full evaluation (minimum date, binding edge, anomalies) for a work."""
        constraints = self.constraints_for(scope, work)
        own_dates = self.dates_provider.dates_for(scope, work)
        logger.checks(
            f"Evaluating {side.value} of {work} against {len(constraints)} predecessor(s)"
        )
        if side == Side.START:
            return self.evaluator.evaluate_start(constraints, own_dates, work)
        return self.evaluator.evaluate_finish(constraints, own_dates, work)

    def minimum_actual_start(self, scope: ProjectScope, work: WorkRef) -> date | None:
        """Earliest permissible actual start, or None if unconstrained."""
        return self.evaluate(scope, work, Side.START).minimum_date

    def minimum_actual_finish(self, scope: ProjectScope, work: WorkRef) -> date | None:
        """Earliest permissible actual finish, or None if unconstrained."""
        return self.evaluate(scope, work, Side.FINISH).minimum_date

    def disabled_dates_for(
        self, scope: ProjectScope, work: WorkRef, side: Side = Side.START
    ) -> DisabledDates:
        """Date-picker exclusion predicate for a work's actual start or finish."""
        return disabled_dates(self.evaluate(scope, work, side).minimum_date)

    def aggregated_section_progress(self, scope: ProjectScope, work_id: int) -> int:
        """Work-level completion: unweighted mean of its sections' percentages.

        Raises:
            RuntimeError: If the service has no progress provider
        """
        if self.progress_provider is None:
            raise RuntimeError("No section progress provider configured")
        return aggregate_section_progress(self.progress_provider.section_progress(scope, work_id))

    def working_days(
        self, start: date, end: date, extra_holidays: list[date] | None = None
    ) -> int:
        """Working days in [start, end] under the configured calendar."""
        calendar: HolidayCalendar = self.config.calendar.to_calendar(extra_holidays)
        return count_workdays(start, end, calendar)

    def _require_work(self, scope: ProjectScope, ref: WorkRef) -> None:
        if not self.dates_provider.has_work(scope, ref):
            raise MissingReferenceError(f"Unknown work: {ref}")
