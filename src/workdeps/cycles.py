"""Cycle detection over dependency adjacency.

The adjacency maps each work to the works it depends on. Adding
``work depends_on target`` closes a cycle exactly when ``work`` is already
reachable from ``target`` by following dependencies, i.e. when ``work`` is an
ancestor of ``target``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import WorkRef

Adjacency = Mapping[WorkRef, Iterable[WorkRef]]


def find_dependency_path(
    adjacency: Adjacency, start: WorkRef, target: WorkRef
) -> list[WorkRef] | None:
    """Find a chain of dependencies leading from start to target.

    Depth-first over the depends-on direction, O(V+E).

    Returns:
        The path ``[start, ..., target]``, or None if target is not reachable
    """
    if start == target:
        return [start]

    parents: dict[WorkRef, WorkRef] = {}
    visited: set[WorkRef] = {start}
    stack = [start]

    while stack:
        current = stack.pop()
        for dep in adjacency.get(current, ()):
            if dep in visited:
                continue
            parents[dep] = current
            if dep == target:
                path = [dep]
                while path[-1] != start:
                    path.append(parents[path[-1]])
                path.reverse()
                return path
            visited.add(dep)
            stack.append(dep)

    return None


def would_create_cycle(
    adjacency: Adjacency, work: WorkRef, depends_on: WorkRef
) -> list[WorkRef] | None:
    """Check whether ``work depends_on depends_on`` would close a cycle.

    Returns:
        The existing path from ``depends_on`` back to ``work`` if the new edge
        would close a cycle, otherwise None
    """
    return find_dependency_path(adjacency, depends_on, work)


def find_cycle(adjacency: Adjacency) -> list[WorkRef] | None:
    """Find any cycle in a complete adjacency.

    Used when validating an edge set that was not built edge by edge
    (e.g. a hand-edited project file).

    Returns:
        A cycle as ``[a, b, ..., a]``, or None if the graph is acyclic
    """
    done: set[WorkRef] = set()

    for root in sorted(adjacency):
        if root in done:
            continue
        path: list[WorkRef] = [root]
        on_path: set[WorkRef] = {root}
        iterators = [iter(sorted(adjacency.get(root, ())))]

        while iterators:
            dep = next(iterators[-1], None)
            if dep is None:
                iterators.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if dep in on_path:
                return [*path[path.index(dep) :], dep]
            if dep in done:
                continue
            path.append(dep)
            on_path.add(dep)
            iterators.append(iter(sorted(adjacency.get(dep, ()))))

    return None
