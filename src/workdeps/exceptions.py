"""Custom exceptions for workdeps."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import WorkRef


class WorkdepsError(Exception):
    """Base exception for all workdeps errors."""

    pass


class ValidationError(WorkdepsError):
    """Raised when validation fails."""

    pass


class CycleError(ValidationError):
    """Raised when committing a dependency would close a cycle.

    ``path`` is the existing chain of dependencies leading from ``depends_on``
    back to ``work``; adding ``work -> depends_on`` would close it.
    """

    def __init__(self, work: WorkRef, depends_on: WorkRef, path: list[WorkRef]):
        self.work = work
        self.depends_on = depends_on
        self.path = path
        chain = " -> ".join(str(ref) for ref in [work, *path])
        super().__init__(
            f"Dependency {work} -> {depends_on} creates a circular dependency: {chain}"
        )


class SelfReferenceError(ValidationError):
    """Raised when a work is made to depend on itself."""

    def __init__(self, work: WorkRef):
        self.work = work
        super().__init__(f"Work {work} cannot depend on itself")


class MissingReferenceError(ValidationError):
    """Raised when a referenced work, section or edge does not exist."""

    pass


class DuplicateDependencyError(ValidationError):
    """Raised when the same predecessor is attached to a work twice."""

    pass


class StaleGraphError(WorkdepsError):
    """Raised when a mutation was prepared against an outdated graph version."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Dependency graph changed (expected version {expected}, found {actual}); retry"
        )


class ParseError(WorkdepsError):
    """Raised when YAML parsing fails."""

    pass


class ProgressError(WorkdepsError):
    """Base class for progress submission errors."""

    pass


class SubmissionConflictError(ProgressError):
    """Raised when a submission is already awaiting approval."""

    pass


class InvalidTransitionError(ProgressError):
    """Raised when a progress entry cannot move to the requested state."""

    pass


class InvalidPercentageError(ProgressError):
    """Raised when a completion percentage is outside 0-100."""

    pass
