"""Dependency graph store.

Holds directed edges ``(work, depends_on, type, lag_days)`` keyed by
``WorkRef`` and answers predecessor/successor queries. Every mutation runs
inside one critical section together with its validation, so the cycle
check can never observe a stale graph.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace

from .cycles import find_cycle, would_create_cycle
from .exceptions import (
    CycleError,
    DuplicateDependencyError,
    MissingReferenceError,
    SelfReferenceError,
    StaleGraphError,
)
from .logger import checks_enabled, get_logger
from .models import DependencyEdge, DependencyType, WorkRef

logger = get_logger()


class DependencyGraph:
    """Mutable, acyclic set of dependency edges for one project."""

    def __init__(self, edges: Iterable[DependencyEdge] = ()):
        """Initialize the store, optionally seeding it with existing edges.

        Seed edges go through the same checks as ``add_edge``.

        Raises:
            SelfReferenceError, DuplicateDependencyError, CycleError: If the
                seed edges are not a valid acyclic set
        """
        self._lock = threading.RLock()
        self._edges: dict[int, DependencyEdge] = {}
        self._predecessors: dict[WorkRef, list[int]] = {}
        self._successors: dict[WorkRef, list[int]] = {}
        self._next_id = 1
        self._version = 0
        for edge in edges:
            self.add_edge(edge.work, edge.depends_on, edge.type, edge.lag_days, edge_id=edge.id)

    @property
    def version(self) -> int:
        """Monotonic counter bumped by every successful mutation."""
        return self._version

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, edge_id: object) -> bool:
        return edge_id in self._edges

    # === Queries ===

    def get_edge(self, edge_id: int) -> DependencyEdge:
        """Get an edge by id.

        Raises:
            MissingReferenceError: If no such edge exists
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            raise MissingReferenceError(f"Unknown dependency id: {edge_id}")
        return edge

    def edges(self) -> tuple[DependencyEdge, ...]:
        """All edges, ordered by id."""
        with self._lock:
            return tuple(self._edges[i] for i in sorted(self._edges))

    def predecessors_of(self, work: WorkRef) -> tuple[DependencyEdge, ...]:
        """Edges where ``work`` is the dependent, ordered by id."""
        with self._lock:
            return tuple(self._edges[i] for i in sorted(self._predecessors.get(work, ())))

    def successors_of(self, work: WorkRef) -> tuple[DependencyEdge, ...]:
        """Edges where ``work`` is the predecessor, ordered by id."""
        with self._lock:
            return tuple(self._edges[i] for i in sorted(self._successors.get(work, ())))

    def works(self) -> set[WorkRef]:
        """Every work reference that appears on either end of an edge."""
        with self._lock:
            return set(self._predecessors) | set(self._successors)

    def adjacency(self) -> dict[WorkRef, list[WorkRef]]:
        """Snapshot of work -> works it depends on."""
        with self._lock:
            return {
                work: [self._edges[i].depends_on for i in ids]
                for work, ids in self._predecessors.items()
            }

    def ancestors_of(self, work: WorkRef) -> set[WorkRef]:
        """All works ``work`` transitively depends on."""
        return self._walk(work, upstream=True)

    def descendants_of(self, work: WorkRef) -> set[WorkRef]:
        """All works that transitively depend on ``work``."""
        return self._walk(work, upstream=False)

    def _walk(self, work: WorkRef, *, upstream: bool) -> set[WorkRef]:
        index = self._predecessors if upstream else self._successors
        found: set[WorkRef] = set()
        with self._lock:
            to_process = [work]
            while to_process:
                current = to_process.pop()
                for edge_id in index.get(current, ()):
                    edge = self._edges[edge_id]
                    neighbour = edge.depends_on if upstream else edge.work
                    if neighbour not in found:
                        found.add(neighbour)
                        to_process.append(neighbour)
        return found

    def topological_order(self) -> list[WorkRef]:
        """Order works so every predecessor comes before its dependents.

        Ties are broken by ``WorkRef`` ordering for stable output.

        Raises:
            CycleError: If the graph somehow contains a cycle
        """
        with self._lock:
            nodes = self.works()
            in_degree = {node: len(self._predecessors.get(node, ())) for node in nodes}
            queue = sorted(node for node, degree in in_degree.items() if degree == 0)
            result: list[WorkRef] = []

            while queue:
                node = queue.pop(0)
                result.append(node)
                released: list[WorkRef] = []
                for edge_id in self._successors.get(node, ()):
                    dependent = self._edges[edge_id].work
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        released.append(dependent)
                queue = sorted(queue + released)

            if len(result) != len(nodes):
                cycle = find_cycle(self.adjacency()) or []
                first = cycle[0] if cycle else next(iter(nodes))
                raise CycleError(first, cycle[1] if len(cycle) > 1 else first, cycle[1:])
            return result

    def check_edge(self, work: WorkRef, depends_on: WorkRef) -> None:
        """Check whether ``work -> depends_on`` may be added, without adding it.

        Raises:
            SelfReferenceError: If work and depends_on are the same
            DuplicateDependencyError: If the edge already exists
            CycleError: If the edge would close a cycle
        """
        with self._lock:
            self._validate_new_edge(work, depends_on)

    # === Mutations ===

    def add_edge(  # noqa: PLR0913 - mirrors the edge fields plus concurrency guard
        self,
        work: WorkRef,
        depends_on: WorkRef,
        dep_type: DependencyType = DependencyType.FS,
        lag_days: int = 0,
        *,
        edge_id: int | None = None,
        expected_version: int | None = None,
    ) -> DependencyEdge:
        """Validate and commit a new edge.

        Args:
            work: The dependent work
            depends_on: The predecessor
            dep_type: Relationship kind
            lag_days: Signed calendar-day offset
            edge_id: Explicit id (when restoring persisted edges)
            expected_version: If given, the graph version the caller last read

        Returns:
            The committed edge

        Raises:
            StaleGraphError: If the graph changed since ``expected_version``
            SelfReferenceError: If work and depends_on are the same
            DuplicateDependencyError: If the edge or edge id already exists
            CycleError: If the edge would close a cycle; nothing is written
        """
        with self._lock:
            self._check_version(expected_version)
            self._validate_new_edge(work, depends_on)
            if edge_id is not None and edge_id in self._edges:
                raise DuplicateDependencyError(f"Dependency id {edge_id} already exists")

            new_id = edge_id if edge_id is not None else self._next_id
            edge = DependencyEdge(
                id=new_id,
                work=work,
                depends_on=depends_on,
                type=DependencyType(dep_type),
                lag_days=int(lag_days),
            )
            self._edges[new_id] = edge
            self._predecessors.setdefault(work, []).append(new_id)
            self._successors.setdefault(depends_on, []).append(new_id)
            self._next_id = max(self._next_id, new_id + 1)
            self._version += 1

        logger.changes(f"Added dependency {edge}")
        return edge

    def update_edge(
        self,
        edge_id: int,
        dep_type: DependencyType | None = None,
        lag_days: int | None = None,
        *,
        expected_version: int | None = None,
    ) -> DependencyEdge:
        """Change an edge's type and/or lag.

        Endpoints are immutable, so the update cannot introduce a cycle.

        Raises:
            StaleGraphError: If the graph changed since ``expected_version``
            MissingReferenceError: If no such edge exists
        """
        with self._lock:
            self._check_version(expected_version)
            edge = self.get_edge(edge_id)
            updated = replace(
                edge,
                type=DependencyType(dep_type) if dep_type is not None else edge.type,
                lag_days=int(lag_days) if lag_days is not None else edge.lag_days,
            )
            self._edges[edge_id] = updated
            self._version += 1

        logger.changes(f"Updated dependency {edge} -> {updated}")
        return updated

    def remove_edge(self, edge_id: int, *, expected_version: int | None = None) -> DependencyEdge:
        """Delete an edge.

        Raises:
            StaleGraphError: If the graph changed since ``expected_version``
            MissingReferenceError: If no such edge exists
        """
        with self._lock:
            self._check_version(expected_version)
            edge = self.get_edge(edge_id)
            del self._edges[edge_id]
            self._unindex(self._predecessors, edge.work, edge_id)
            self._unindex(self._successors, edge.depends_on, edge_id)
            self._version += 1

        logger.changes(f"Removed dependency {edge}")
        return edge

    def remove_work(self, work: WorkRef) -> list[DependencyEdge]:
        """Delete every edge touching ``work`` (used when a work is deleted)."""
        with self._lock:
            ids = set(self._predecessors.get(work, ())) | set(self._successors.get(work, ()))
            return [self.remove_edge(edge_id) for edge_id in sorted(ids)]

    # === Internals ===

    def _check_version(self, expected_version: int | None) -> None:
        if expected_version is not None and expected_version != self._version:
            raise StaleGraphError(expected_version, self._version)

    def _validate_new_edge(self, work: WorkRef, depends_on: WorkRef) -> None:
        if work == depends_on:
            raise SelfReferenceError(work)

        for edge_id in self._predecessors.get(work, ()):
            if self._edges[edge_id].depends_on == depends_on:
                raise DuplicateDependencyError(f"Work {work} already depends on {depends_on}")

        logger.checks(f"Cycle check: does {depends_on} already depend on {work}?")
        path = would_create_cycle(self.adjacency(), work, depends_on)
        if path is not None:
            if checks_enabled():
                logger.checks(f"  Rejected: {' -> '.join(str(ref) for ref in path)}")
            raise CycleError(work, depends_on, path)

    @staticmethod
    def _unindex(index: dict[WorkRef, list[int]], work: WorkRef, edge_id: int) -> None:
        ids = index.get(work)
        if ids is None:
            return
        ids.remove(edge_id)
        if not ids:
            del index[work]
