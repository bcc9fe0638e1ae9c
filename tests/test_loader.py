"""Tests for project loading and validation."""

from pathlib import Path

import pytest

from workdeps.exceptions import (
    CycleError,
    MissingReferenceError,
    ParseError,
    SelfReferenceError,
    ValidationError,
)
from workdeps.loader import load_project, parse_project_data
from workdeps.models import DependencyEdge, DependencyType, WorkRef
from workdeps.store import write_snapshot


def write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "project.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadProject:
    """Test loading the sample project."""

    def test_loads_works_and_sections(self, project_file: Path) -> None:
        """Test works, names and section data are parsed."""
        project = load_project(project_file)

        assert project.id == 7
        assert project.name == "Tower A"
        assert sorted(project.works) == [10, 20, 30, 40]
        assert project.work_names[30] == "Frame"
        frame = project.get_work(30)
        assert frame.sections_count == 3
        assert frame.section_progress == {1: 0, 2: 50, 3: 100}
        assert len(project.all_refs()) == 7

    def test_loads_dependencies(self, project_file: Path) -> None:
        """Test edges get sequential ids and parsed references."""
        project = load_project(project_file)
        edges = project.graph.edges()

        assert [edge.id for edge in edges] == [1, 2, 3]
        assert edges[0].lag_days == 2
        assert edges[1].work == WorkRef(30, 1)
        assert edges[1].type == DependencyType.SS
        assert edges[2].depends_on == WorkRef(30, 1)

    def test_snapshot_replaces_file_edges(self, project_file: Path, tmp_path: Path) -> None:
        """Test edges from an existing snapshot win over the project file."""
        snapshot = tmp_path / "deps.yaml"
        write_snapshot(snapshot, [DependencyEdge(id=9, work=WorkRef(40), depends_on=WorkRef(10))])

        project = load_project(project_file, snapshot)

        assert [edge.id for edge in project.graph.edges()] == [9]

    def test_missing_snapshot_ignored(self, project_file: Path, tmp_path: Path) -> None:
        """Test a snapshot path that does not exist yet is fine."""
        project = load_project(project_file, tmp_path / "absent.yaml")
        assert len(project.graph) == 3


class TestLoadErrors:
    """Test invalid project files."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file is a parse error."""
        with pytest.raises(ParseError, match="File not found"):
            load_project(tmp_path / "nope.yaml")

    def test_bad_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML."""
        with pytest.raises(ParseError, match="Failed to parse YAML"):
            load_project(write(tmp_path, "works: [unclosed"))

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        """Test a list at the root is refused."""
        with pytest.raises(ParseError, match="dictionary"):
            load_project(write(tmp_path, "- 1\n- 2\n"))

    def test_unknown_reference(self) -> None:
        """Test an edge to a missing work."""
        data = {"works": {1: {}}, "dependencies": [{"work": 1, "depends_on": 2}]}
        with pytest.raises(MissingReferenceError, match="unknown work: 2"):
            parse_project_data(data)

    def test_unknown_section(self) -> None:
        """Test an edge to a section past the count."""
        data = {
            "works": {1: {}, 2: {"sections": 2}},
            "dependencies": [{"work": 1, "depends_on": "2/3"}],
        }
        with pytest.raises(MissingReferenceError):
            parse_project_data(data)

    def test_section_of_undivided_work(self) -> None:
        """Test a section number on a single-section work is refused."""
        data = {
            "works": {10: {}, 20: {}},
            "dependencies": [{"work": "10/1", "depends_on": 20}],
        }
        with pytest.raises(MissingReferenceError, match="unknown work: 10/1"):
            parse_project_data(data)

    def test_self_reference(self) -> None:
        """Test an edge from a work to itself."""
        data = {"works": {1: {}}, "dependencies": [{"work": 1, "depends_on": 1}]}
        with pytest.raises(SelfReferenceError):
            parse_project_data(data)

    def test_cycle(self) -> None:
        """Test a cycle spelled out in the file."""
        data = {
            "works": {1: {}, 2: {}, 3: {}},
            "dependencies": [
                {"work": 2, "depends_on": 1},
                {"work": 3, "depends_on": 2},
                {"work": 1, "depends_on": 3},
            ],
        }
        with pytest.raises(CycleError, match="circular dependency"):
            parse_project_data(data)

    def test_invalid_progress(self) -> None:
        """Test percentages outside 0-100 fail schema validation."""
        with pytest.raises(ValidationError, match="Invalid project structure"):
            parse_project_data({"works": {1: {"progress": 150}}})

    def test_section_data_out_of_range(self) -> None:
        """Test section dates for a section the work does not have."""
        with pytest.raises(ValidationError):
            parse_project_data({"works": {1: {"sections": 2, "section_dates": {3: {}}}}})

    def test_invalid_reference_syntax(self) -> None:
        """Test a malformed work reference."""
        data = {"works": {1: {}}, "dependencies": [{"work": "1/a", "depends_on": 1}]}
        with pytest.raises(ValidationError, match="Invalid work reference"):
            parse_project_data(data)


class TestEdgeIds:
    """Test id assignment for file edges."""

    def test_explicit_ids_kept_and_gaps_filled(self) -> None:
        """Test missing ids avoid the ones given explicitly."""
        data = {
            "works": {1: {}, 2: {}, 3: {}, 4: {}},
            "dependencies": [
                {"work": 2, "depends_on": 1},
                {"id": 1, "work": 3, "depends_on": 2},
                {"work": 4, "depends_on": 3, "type": "ff"},
            ],
        }
        project = parse_project_data(data)
        by_work = {edge.work: edge for edge in project.graph.edges()}
        assert by_work[WorkRef(3)].id == 1
        assert by_work[WorkRef(2)].id == 2
        assert by_work[WorkRef(4)].id == 3
        assert by_work[WorkRef(4)].type == DependencyType.FF
