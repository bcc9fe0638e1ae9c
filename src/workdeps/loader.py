"""Project loading with full validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .cycles import find_cycle
from .exceptions import (
    CycleError,
    MissingReferenceError,
    ParseError,
    SelfReferenceError,
    ValidationError,
)
from .graph import DependencyGraph
from .logger import get_logger
from .models import DependencyEdge, ScheduleDates, WorkRef
from .project import Project
from .schemas import ProjectSchema, SectionSchema
from .sections import SectionedWork
from .store import read_snapshot

logger = get_logger()


def _dates(data: SectionSchema) -> ScheduleDates:
    return ScheduleDates(
        plan_start=data.plan_start,
        plan_end=data.plan_end,
        actual_start=data.actual_start,
        actual_end=data.actual_end,
    )


def parse_project_data(data: dict[str, Any]) -> Project:
    """Build a project from already-loaded YAML data (without edges)."""
    try:
        schema = ProjectSchema(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid project structure: {e}") from e

    project = Project(id=schema.project.id, name=schema.project.name, holidays=schema.holidays)
    for work_id, work_data in schema.works.items():
        project.works[work_id] = SectionedWork(
            work_id=work_id,
            sections_count=work_data.sections,
            dates=_dates(work_data),
            progress=work_data.progress,
            section_dates={n: _dates(s) for n, s in work_data.section_dates.items()},
            section_progress={n: s.progress for n, s in work_data.section_dates.items()},
        )
        project.work_names[work_id] = work_data.name

    project.graph = build_graph(project, _edges_from_schema(schema))
    return project


def _edges_from_schema(schema: ProjectSchema) -> list[DependencyEdge]:
    edges: list[DependencyEdge] = []
    used_ids = {dep.id for dep in schema.dependencies if dep.id is not None}
    next_id = 1
    for dep in schema.dependencies:
        try:
            work = WorkRef.parse(dep.work)
            depends_on = WorkRef.parse(dep.depends_on)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        edge_id = dep.id
        if edge_id is None:
            while next_id in used_ids:
                next_id += 1
            edge_id = next_id
            used_ids.add(edge_id)
        edges.append(
            DependencyEdge(
                id=edge_id, work=work, depends_on=depends_on, type=dep.type, lag_days=dep.lag
            )
        )
    return edges


def build_graph(project: Project, edges: list[DependencyEdge]) -> DependencyGraph:
    """Validate edges against the project's works and load them into a graph.

    Raises:
        MissingReferenceError: If an edge names an unknown work or section
        SelfReferenceError: If an edge points at its own work
        CycleError: If the edges contain a cycle (reported in full)
    """
    adjacency: dict[WorkRef, list[WorkRef]] = {}
    for edge in edges:
        for ref in (edge.work, edge.depends_on):
            if not project.has_work(project.scope, ref):
                raise MissingReferenceError(f"Dependency #{edge.id} references unknown work: {ref}")
        if edge.work == edge.depends_on:
            raise SelfReferenceError(edge.work)
        adjacency.setdefault(edge.work, []).append(edge.depends_on)

    cycle = find_cycle(adjacency)
    if cycle is not None:
        raise CycleError(cycle[0], cycle[1], cycle[1:])

    return DependencyGraph(edges)


def load_project(path: Path | str, snapshot_path: Path | None = None) -> Project:
    """Load and validate a project file.

    Args:
        path: Path to the project YAML file
        snapshot_path: Optional dependency snapshot; when it exists its edges
            replace the ``dependencies`` section of the project file

    Returns:
        Fully validated Project
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    project = parse_project_data(data)  # type: ignore[arg-type]

    if snapshot_path is not None and snapshot_path.exists():
        try:
            edges = read_snapshot(snapshot_path)
        except ValueError as e:
            raise ParseError(f"Invalid snapshot {snapshot_path}: {e}") from e
        project.graph = build_graph(project, edges)
        logger.changes(f"Restored {len(edges)} dependencies from {snapshot_path}")

    return project
