"""Dependency snapshot files.

A snapshot preserves the edge set of a project between runs so that edges
added from the command line survive and can be restored into a graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import yaml

from .models import DependencyEdge, DependencyType, WorkRef

SNAPSHOT_VERSION = 1


def write_snapshot(path: Path, edges: list[DependencyEdge] | tuple[DependencyEdge, ...]) -> None:
    """Write edges to a snapshot file.

    Args:
        path: Path to write the snapshot
        edges: Edges to persist (ids are preserved)
    """
    output: dict[str, Any] = {
        "version": SNAPSHOT_VERSION,
        "edges": [
            {
                "id": edge.id,
                "work": str(edge.work),
                "depends_on": str(edge.depends_on),
                "type": edge.type.value,
                "lag": edge.lag_days,
            }
            for edge in sorted(edges, key=lambda e: e.id)
        ],
    }

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False)


def read_snapshot(path: Path) -> list[DependencyEdge]:
    """Load edges from a snapshot file.

    The edges are not validated for cycles here; restore them through
    ``DependencyGraph`` to get that check.

    Raises:
        ValueError: If the file format is invalid or the version is unsupported
    """
    with path.open(encoding="utf-8") as f:
        raw_data: Any = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid snapshot format: expected dict, got {type(raw_data)}")

    data = cast(dict[str, Any], raw_data)

    version = data.get("version")
    if version is None:
        raise ValueError("Snapshot missing 'version' field")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version {version}, expected {SNAPSHOT_VERSION}")

    raw_edges = data.get("edges")
    if raw_edges is None:
        raw_edges = []
    if not isinstance(raw_edges, list):
        raise ValueError("Snapshot 'edges' field must be a list")

    edges: list[DependencyEdge] = []
    for item in cast(list[Any], raw_edges):
        if not isinstance(item, dict):
            raise ValueError(f"Snapshot edge must be a dict, got {item!r}")
        edge_data = cast(dict[str, Any], item)
        try:
            edges.append(
                DependencyEdge(
                    id=int(edge_data["id"]),
                    work=WorkRef.parse(str(edge_data["work"])),
                    depends_on=WorkRef.parse(str(edge_data["depends_on"])),
                    type=DependencyType(str(edge_data.get("type", "FS")).upper()),
                    lag_days=int(edge_data.get("lag", 0)),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid snapshot edge {edge_data!r}: {e}") from e

    return edges
