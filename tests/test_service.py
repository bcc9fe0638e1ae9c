"""Tests for the dependency service over a loaded project."""

from datetime import date
from pathlib import Path

import pytest

from workdeps.config import EngineConfig, EvaluatorConfig
from workdeps.exceptions import (
    CycleError,
    MissingReferenceError,
    SelfReferenceError,
    StaleGraphError,
)
from workdeps.loader import load_project
from workdeps.models import DependencyType, ProjectScope, Side, WorkRef
from workdeps.project import Project
from workdeps.service import DependencyService


@pytest.fixture
def project(project_file: Path) -> Project:
    return load_project(project_file)


@pytest.fixture
def service(project: Project) -> DependencyService:
    svc = DependencyService(project, project)
    svc.attach_graph(project.scope, project.graph)
    return svc


class TestEvaluation:
    """Test minimum-date queries through the service."""

    def test_finish_to_start_uses_actual_finish(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test work 20 may start two days after work 10 actually finished."""
        assert service.minimum_actual_start(project.scope, WorkRef(20)) == date(2025, 3, 14)

    def test_start_to_start_on_section(self, service: DependencyService, project: Project) -> None:
        """Test section 30/1 may start when work 20 is planned to start."""
        assert service.minimum_actual_start(project.scope, WorkRef(30, 1)) == date(2025, 3, 12)

    def test_section_to_section(self, service: DependencyService, project: Project) -> None:
        """Test a section chained to its sibling."""
        assert service.minimum_actual_start(project.scope, WorkRef(30, 2)) == date(2025, 4, 2)

    def test_unconstrained(self, service: DependencyService, project: Project) -> None:
        """Test works without predecessors are unconstrained."""
        assert service.minimum_actual_start(project.scope, WorkRef(10)) is None
        assert service.minimum_actual_start(project.scope, WorkRef(30)) is None

    def test_sections_are_constrained_independently(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test an edge on one section leaves its siblings free until they get their own."""
        assert service.minimum_actual_start(project.scope, WorkRef(30, 1)) == date(2025, 3, 12)
        assert service.minimum_actual_start(project.scope, WorkRef(30, 3)) is None

        edge = service.create_dependency(project.scope, WorkRef(30, 3), WorkRef(20))

        result = service.evaluate(project.scope, WorkRef(30, 3))
        assert result.minimum_date == date(2025, 3, 20)
        assert result.binding is not None
        assert result.binding.edge == edge
        assert service.minimum_actual_start(project.scope, WorkRef(30, 1)) == date(2025, 3, 12)

    def test_minimum_finish(self, service: DependencyService, project: Project) -> None:
        """Test the start bound shifted by work 20's planned eight days."""
        assert service.minimum_actual_finish(project.scope, WorkRef(20)) == date(2025, 3, 22)

    def test_evaluate_reports_binding(self, service: DependencyService, project: Project) -> None:
        """Test the full result names the binding edge."""
        result = service.evaluate(project.scope, WorkRef(20))
        assert result.binding is not None
        assert result.binding.edge.depends_on == WorkRef(10)
        assert result.anomalies == []

    def test_missing_predecessor_dates_flagged(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test a dateless predecessor yields an anomaly and no bound."""
        service.create_dependency(project.scope, WorkRef(10), WorkRef(40))
        result = service.evaluate(project.scope, WorkRef(10))
        assert result.minimum_date is None
        assert len(result.anomalies) == 1

    def test_disabled_dates(self, service: DependencyService, project: Project) -> None:
        """Test the date-picker predicate follows the minimum start."""
        predicate = service.disabled_dates_for(project.scope, WorkRef(20))
        assert predicate(date(2025, 3, 13))
        assert not predicate(date(2025, 3, 14))
        finish = service.disabled_dates_for(project.scope, WorkRef(20), Side.FINISH)
        assert finish(date(2025, 3, 21))
        assert not finish(date(2025, 3, 22))

    def test_evaluator_config_applies(self, project: Project) -> None:
        """Test disabling planned fallback through the engine config."""
        config = EngineConfig(evaluator=EvaluatorConfig(use_planned_fallback=False))
        svc = DependencyService(project, project, config)
        svc.attach_graph(project.scope, project.graph)
        assert svc.minimum_actual_start(project.scope, WorkRef(30, 1)) is None
        assert svc.minimum_actual_start(project.scope, WorkRef(20)) == date(2025, 3, 14)


class TestMutations:
    """Test dependency creation and removal through the service."""

    def test_create_and_query(self, service: DependencyService, project: Project) -> None:
        """Test a new edge is visible in both directions."""
        edge = service.create_dependency(
            project.scope, WorkRef(40), WorkRef(30, 3), DependencyType.FF, 5
        )
        assert edge.id == 4
        assert service.predecessors_of(project.scope, WorkRef(40)) == [edge]
        assert service.successors_of(project.scope, WorkRef(30, 3)) == [edge]
        assert len(service.list_dependencies(project.scope)) == 4

    def test_cycle_through_sections_rejected(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test 10 cannot depend on 30/2, which transitively depends on 10."""
        with pytest.raises(CycleError):
            service.create_dependency(project.scope, WorkRef(10), WorkRef(30, 2))
        assert len(service.list_dependencies(project.scope)) == 3

    def test_check_dependency(self, service: DependencyService, project: Project) -> None:
        """Test dry-run validation."""
        service.check_dependency(project.scope, WorkRef(40), WorkRef(10))
        with pytest.raises(SelfReferenceError):
            service.check_dependency(project.scope, WorkRef(40), WorkRef(40))
        assert len(service.list_dependencies(project.scope)) == 3

    def test_unknown_work(self, service: DependencyService, project: Project) -> None:
        """Test edges to missing works or sections are refused."""
        with pytest.raises(MissingReferenceError, match="Unknown work"):
            service.create_dependency(project.scope, WorkRef(99), WorkRef(10))
        with pytest.raises(MissingReferenceError):
            service.create_dependency(project.scope, WorkRef(30, 4), WorkRef(10))

    def test_section_of_undivided_work_refused(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test 10/1 is not another name for the single-section work 10."""
        with pytest.raises(MissingReferenceError, match="Unknown work: 10/1"):
            service.create_dependency(project.scope, WorkRef(10, 1), WorkRef(20))
        with pytest.raises(MissingReferenceError):
            service.create_dependency(project.scope, WorkRef(40), WorkRef(10, 1))
        assert len(service.list_dependencies(project.scope)) == 3

    def test_wrong_project_scope(self, service: DependencyService) -> None:
        """Test a scope for another project cannot reach these works."""
        with pytest.raises(MissingReferenceError, match="Unknown project"):
            service.create_dependency(ProjectScope(8), WorkRef(40), WorkRef(10))

    def test_graphs_are_per_project(self, service: DependencyService, project: Project) -> None:
        """Test another project starts with an empty graph."""
        assert service.list_dependencies(ProjectScope(8)) == []
        assert len(service.list_dependencies(project.scope)) == 3

    def test_update_and_delete(self, service: DependencyService, project: Project) -> None:
        """Test editing lag changes the evaluation and deleting frees the work."""
        version = service.graph_for(project.scope).version
        service.update_dependency(project.scope, 1, lag_days=5, expected_version=version)
        assert service.minimum_actual_start(project.scope, WorkRef(20)) == date(2025, 3, 17)

        with pytest.raises(StaleGraphError):
            service.delete_dependency(project.scope, 1, expected_version=version)

        service.delete_dependency(project.scope, 1)
        assert service.minimum_actual_start(project.scope, WorkRef(20)) is None


class TestProgressAndCalendar:
    """Test section progress and working-day helpers."""

    def test_aggregated_section_progress(
        self, service: DependencyService, project: Project
    ) -> None:
        """Test work 30 sections at 0, 50 and 100 give 50."""
        assert service.aggregated_section_progress(project.scope, 30) == 50
        assert service.aggregated_section_progress(project.scope, 20) == 40

    def test_progress_requires_provider(self, project: Project) -> None:
        """Test a service without a progress source refuses aggregation."""
        with pytest.raises(RuntimeError):
            DependencyService(project).aggregated_section_progress(project.scope, 30)

    def test_working_days(self, service: DependencyService) -> None:
        """Test weekday holidays are excluded."""
        assert service.working_days(date(2025, 3, 3), date(2025, 3, 9)) == 5
        assert service.working_days(date(2025, 3, 3), date(2025, 3, 9), [date(2025, 3, 5)]) == 4
