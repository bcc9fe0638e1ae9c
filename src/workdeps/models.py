"""Data models for workdeps."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from functools import total_ordering


@dataclass(frozen=True)
class ProjectScope:
    """Identity of the project a call operates on.

    Passed explicitly into every service call instead of living in ambient
    request state.
    """

    project_id: int
    actor: str | None = None


@total_ordering
@dataclass(frozen=True)
class WorkRef:
    """Identity of a schedulable unit: a whole work or one of its sections.

    ``section`` is None for the whole work, 1..N for a section of a
    multi-section work.
    """

    work_id: int
    section: int | None = None

    @classmethod
    def parse(cls, ref_str: str | int) -> WorkRef:
        """Parse a work reference.

        Supported formats:
        - "12" or 12 - whole work 12
        - "12/3" - section 3 of work 12
        """
        if isinstance(ref_str, int):
            return cls(work_id=ref_str)

        match = re.match(r"^\s*(\d+)\s*(?:/\s*(\d+))?\s*$", str(ref_str))
        if not match:
            raise ValueError(f"Invalid work reference: {ref_str!r}")
        work_id, section = match.groups()
        return cls(work_id=int(work_id), section=int(section) if section else None)

    @property
    def whole_work(self) -> WorkRef:
        """The reference to the work this section belongs to."""
        return WorkRef(self.work_id)

    def __str__(self) -> str:
        if self.section is None:
            return str(self.work_id)
        return f"{self.work_id}/{self.section}"

    def _sort_key(self) -> tuple[int, int]:
        return (self.work_id, self.section or 0)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, WorkRef):
            return NotImplemented
        return self._sort_key() < other._sort_key()


@dataclass(frozen=True)
class ScheduleDates:
    """Planned and actual dates of a work or section. Any of them may be missing."""

    plan_start: date | None = None
    plan_end: date | None = None
    actual_start: date | None = None
    actual_end: date | None = None

    @property
    def effective_start(self) -> date | None:
        """Actual start, falling back to planned start."""
        return self.actual_start or self.plan_start

    @property
    def effective_finish(self) -> date | None:
        """Actual finish, falling back to planned finish."""
        return self.actual_end or self.plan_end

    @property
    def plan_order_invalid(self) -> bool:
        """True when both planned dates are set and start is after end."""
        return (
            self.plan_start is not None
            and self.plan_end is not None
            and self.plan_start > self.plan_end
        )

    @property
    def actual_order_invalid(self) -> bool:
        """True when both actual dates are set and start is after end."""
        return (
            self.actual_start is not None
            and self.actual_end is not None
            and self.actual_start > self.actual_end
        )

    @property
    def planned_duration_days(self) -> int | None:
        """Planned span in calendar days, or None if unknown or inverted."""
        if self.plan_start is None or self.plan_end is None or self.plan_order_invalid:
            return None
        return (self.plan_end - self.plan_start).days


class DependencyType(str, Enum):
    """Precedence relationship kinds."""

    FS = "FS"  # finish-to-start
    SS = "SS"  # start-to-start
    FF = "FF"  # finish-to-finish
    SF = "SF"  # start-to-finish

    @property
    def description(self) -> str:
        """Human readable meaning of the relationship."""
        return _DEPENDENCY_DESCRIPTIONS[self]

    @property
    def predecessor_uses_finish(self) -> bool:
        """Whether the predecessor's finish (rather than start) anchors the constraint."""
        return self in (DependencyType.FS, DependencyType.FF)

    @property
    def constrains_finish(self) -> bool:
        """Whether the constraint binds the dependent's finish (rather than start)."""
        return self in (DependencyType.FF, DependencyType.SF)


_DEPENDENCY_DESCRIPTIONS = {
    DependencyType.FS: "starts after the predecessor finishes",
    DependencyType.SS: "starts together with the predecessor",
    DependencyType.FF: "finishes together with the predecessor",
    DependencyType.SF: "finishes when the predecessor starts",
}


@dataclass(frozen=True)
class DependencyEdge:
    """A directed precedence constraint: ``work`` depends on ``depends_on``."""

    id: int
    work: WorkRef
    depends_on: WorkRef
    type: DependencyType = DependencyType.FS
    lag_days: int = 0

    def __str__(self) -> str:
        lag = f" {self.lag_days:+d}d" if self.lag_days else ""
        return f"#{self.id} {self.work} <-{self.type.value}- {self.depends_on}{lag}"


@dataclass(frozen=True)
class ConstraintInput:
    """One predecessor edge joined with the predecessor's current dates."""

    edge: DependencyEdge
    predecessor_dates: ScheduleDates | None

    @property
    def type(self) -> DependencyType:
        return self.edge.type

    @property
    def lag_days(self) -> int:
        return self.edge.lag_days


class Side(str, Enum):
    """Which end of the dependent work a bound applies to."""

    START = "start"
    FINISH = "finish"


class AnomalyKind(str, Enum):
    """Soft data-quality signals raised during evaluation."""

    MISSING_PREDECESSOR_DATA = "missing_predecessor_data"
    INVALID_DATE_ORDER = "invalid_date_order"
    UNKNOWN_DURATION = "unknown_duration"


@dataclass(frozen=True)
class Anomaly:
    """A data-quality problem that did not stop evaluation."""

    kind: AnomalyKind
    ref: WorkRef
    message: str
    edge_id: int | None = None


@dataclass(frozen=True)
class BindingConstraint:
    """The lower bound one predecessor edge imposes on the dependent work."""

    edge: DependencyEdge
    bound: date
    side: Side


def _default_bindings() -> list[BindingConstraint]:
    return []


def _default_anomalies() -> list[Anomaly]:
    return []


@dataclass
class ConstraintResult:
    """Evaluator output for one dependent work.

    ``minimum_date`` is None when no predecessor constrains the work.
    ``binding`` is the tightest contribution, ``contributions`` holds every
    predecessor's bound so a UI can explain why a date is refused.
    """

    work: WorkRef
    side: Side
    minimum_date: date | None
    binding: BindingConstraint | None = None
    contributions: list[BindingConstraint] = field(default_factory=_default_bindings)
    anomalies: list[Anomaly] = field(default_factory=_default_anomalies)

    @property
    def is_constrained(self) -> bool:
        return self.minimum_date is not None
