"""Command-line interface for workdeps."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import EngineConfig
from .exceptions import WorkdepsError
from .loader import load_project
from .logger import setup_logger
from .models import ConstraintResult, DependencyEdge, DependencyType, Side, WorkRef
from .project import Project
from .service import DependencyService
from .store import write_snapshot

app = typer.Typer(
    name="workdeps",
    help="Schedule dependency engine for construction work tracking",
    add_completion=False,
)

ProjectArg = Annotated[Path, typer.Argument(help="Path to the project YAML file")]
WorkArg = Annotated[str, typer.Argument(help="Work reference: ID or ID/SECTION")]
SnapshotOpt = Annotated[
    Path | None,
    typer.Option("--snapshot", "-s", help="Dependency snapshot file (read and written)"),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: workdeps_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for workdeps commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _open(project_file: Path, snapshot: Path | None = None) -> tuple[Project, DependencyService]:
    """Load a project and build a service over it."""
    try:
        config: EngineConfig = context.engine_config(project_file.parent)
        project = load_project(project_file, snapshot)
    except (WorkdepsError, FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from None

    service = DependencyService(project, project, config)
    service.attach_graph(project.scope, project.graph)
    return project, service


def _parse_ref(ref_str: str) -> WorkRef:
    try:
        return WorkRef.parse(ref_str)
    except ValueError as e:
        raise _fail(str(e)) from None


def _existing_ref(project: Project, ref_str: str) -> WorkRef:
    ref = _parse_ref(ref_str)
    if not project.has_work(project.scope, ref):
        raise _fail(f"Unknown work: {ref}")
    return ref


def _parse_date_option(date_str: str, option_name: str) -> date:
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise _fail(f"Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.") from None


def _format_edge(edge: DependencyEdge, project: Project) -> str:
    name = project.work_names.get(edge.depends_on.work_id, "")
    lag = f" {edge.lag_days:+d}d" if edge.lag_days else ""
    label = f" ({name})" if name else ""
    return f"  #{edge.id}: {edge.work} depends on {edge.depends_on}{label} [{edge.type.value}{lag}]"


def _print_result(result: ConstraintResult) -> None:
    side = result.side.value
    if result.minimum_date is None:
        typer.echo(f"{result.work}: actual {side} unconstrained")
    else:
        typer.echo(f"{result.work}: earliest actual {side} {result.minimum_date.isoformat()}")
        if result.binding is not None:
            typer.echo(f"  binding: {result.binding.edge}")
        else:
            typer.echo("  binding: own actual start")
    for anomaly in result.anomalies:
        typer.echo(f"  warning: {anomaly.message}")


@app.command()
def check(project_file: ProjectArg, snapshot: SnapshotOpt = None) -> None:
    """Load and validate a project (references, self-dependencies, cycles)."""
    project, _ = _open(project_file, snapshot)
    typer.echo(
        f"OK: {len(project.works)} works, {len(project.all_refs())} schedulable units, "
        f"{len(project.graph)} dependencies"
    )


@app.command()
def deps(
    project_file: ProjectArg,
    work: Annotated[
        str | None, typer.Option("--work", "-w", help="Only show dependencies of this work")
    ] = None,
    snapshot: SnapshotOpt = None,
) -> None:
    """List dependencies."""
    project, service = _open(project_file, snapshot)
    scope = project.scope

    if work is None:
        for edge in service.list_dependencies(scope):
            typer.echo(_format_edge(edge, project))
        return

    ref = _parse_ref(work)
    typer.echo(f"Predecessors of {ref}:")
    for edge in service.predecessors_of(scope, ref):
        typer.echo(_format_edge(edge, project))
    typer.echo(f"Successors of {ref}:")
    for edge in service.successors_of(scope, ref):
        typer.echo(_format_edge(edge, project))


@app.command("add-dep")
def add_dep(  # noqa: PLR0913 - CLI command needs multiple options
    project_file: ProjectArg,
    work: WorkArg,
    depends_on: Annotated[str, typer.Argument(help="Predecessor reference: ID or ID/SECTION")],
    *,
    dep_type: Annotated[
        DependencyType, typer.Option("--type", "-t", help="Relationship kind")
    ] = DependencyType.FS,
    lag: Annotated[
        int, typer.Option("--lag", "-l", help="Lag in calendar days (negative = lead)")
    ] = 0,
    snapshot: SnapshotOpt = None,
) -> None:
    """Add a dependency after checking it does not create a cycle."""
    project, service = _open(project_file, snapshot)
    try:
        edge = service.create_dependency(
            project.scope, _parse_ref(work), _parse_ref(depends_on), dep_type, lag
        )
    except WorkdepsError as e:
        raise _fail(str(e)) from None

    typer.echo(f"Added {edge}")
    if snapshot is not None:
        write_snapshot(snapshot, service.list_dependencies(project.scope))
        typer.echo(f"Snapshot written to {snapshot}")


@app.command("rm-dep")
def rm_dep(
    project_file: ProjectArg,
    edge_id: Annotated[int, typer.Argument(help="Dependency id")],
    snapshot: SnapshotOpt = None,
) -> None:
    """Remove a dependency."""
    project, service = _open(project_file, snapshot)
    try:
        service.delete_dependency(project.scope, edge_id)
    except WorkdepsError as e:
        raise _fail(str(e)) from None

    typer.echo(f"Removed dependency #{edge_id}")
    if snapshot is not None:
        write_snapshot(snapshot, service.list_dependencies(project.scope))


@app.command("min-start")
def min_start(project_file: ProjectArg, work: WorkArg, snapshot: SnapshotOpt = None) -> None:
    """Show the earliest permissible actual start of a work and why."""
    project, service = _open(project_file, snapshot)
    _print_result(service.evaluate(project.scope, _existing_ref(project, work), Side.START))


@app.command("min-finish")
def min_finish(project_file: ProjectArg, work: WorkArg, snapshot: SnapshotOpt = None) -> None:
    """Show the earliest permissible actual finish of a work and why."""
    project, service = _open(project_file, snapshot)
    _print_result(service.evaluate(project.scope, _existing_ref(project, work), Side.FINISH))


@app.command()
def disabled(  # noqa: PLR0913 - CLI command needs multiple options
    project_file: ProjectArg,
    work: WorkArg,
    *,
    from_date: Annotated[str, typer.Option("--from", help="Window start (YYYY-MM-DD)")],
    to_date: Annotated[str, typer.Option("--to", help="Window end (YYYY-MM-DD)")],
    finish: Annotated[
        bool, typer.Option("--finish", help="Project the finish date instead of the start")
    ] = False,
    snapshot: SnapshotOpt = None,
) -> None:
    """List the dates a date picker must refuse inside a window."""
    start = _parse_date_option(from_date, "--from")
    end = _parse_date_option(to_date, "--to")
    project, service = _open(project_file, snapshot)

    side = Side.FINISH if finish else Side.START
    predicate = service.disabled_dates_for(project.scope, _existing_ref(project, work), side)
    blocked = predicate.within(start, end)
    if not blocked:
        typer.echo("No disabled dates")
        return
    for day in blocked:
        typer.echo(day.isoformat())


@app.command()
def progress(
    project_file: ProjectArg, work_id: Annotated[int, typer.Argument(help="Work ID")]
) -> None:
    """Show a work's completion (mean of its sections)."""
    project, service = _open(project_file)
    try:
        percent = service.aggregated_section_progress(project.scope, work_id)
        sections = project.section_progress(project.scope, work_id)
    except WorkdepsError as e:
        raise _fail(str(e)) from None

    typer.echo(f"Work {work_id}: {percent}%")
    if len(sections) > 1:
        for number, value in enumerate(sections, start=1):
            typer.echo(f"  section {number}: {value}%")


@app.command()
def workdays(
    start_date: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end_date: Annotated[str, typer.Argument(help="Last day (YYYY-MM-DD)")],
    project_file: Annotated[
        Path | None, typer.Option("--project", "-p", help="Include this project's holidays")
    ] = None,
) -> None:
    """Count working days between two dates, inclusive."""
    start = _parse_date_option(start_date, "start date")
    end = _parse_date_option(end_date, "end date")

    if project_file is not None:
        project, service = _open(project_file)
        extra = project.holidays
    else:
        try:
            config = context.engine_config()
        except (FileNotFoundError, ValueError) as e:
            raise _fail(str(e)) from None
        service = DependencyService(Project(id=0), config=config)
        extra = []

    typer.echo(str(service.working_days(start, end, extra)))


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
