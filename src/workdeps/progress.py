"""Progress submission workflow.

Each completion-percentage change for a work or section moves through
draft -> submitted -> approved | rejected. Approval commits the submitted
value as the unit's current percentage; rejection discards it. Role checks
for approve/reject belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from .config import ProgressConfig, SubmissionConflictPolicy
from .exceptions import InvalidTransitionError, SubmissionConflictError
from .logger import get_logger
from .models import WorkRef
from .sections import aggregate_section_progress, section_refs, validate_percent

logger = get_logger()


class SubmissionStatus(str, Enum):
    """State of a sent entry. Drafts stay local and are never entries."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUPERSEDED = "superseded"


def _now() -> datetime:
    return datetime.now()  # noqa: DTZ005 - wall clock of the deployment


@dataclass(frozen=True)
class ProgressEntry:
    """One percentage change and where it is in the workflow."""

    id: int
    work: WorkRef
    percent: int
    status: SubmissionStatus
    submitted_by: str | None = None
    decided_by: str | None = None
    created_at: datetime = field(default_factory=_now)
    decided_at: datetime | None = None


class ProgressLedger:
    """Tracks drafts, submissions and decisions per (work, section).

    At most one submitted entry may be outstanding per unit. With the
    default ``reject`` policy a second submission raises
    ``SubmissionConflictError`` until the first is decided; with
    ``supersede`` the outstanding entry is closed as superseded and the new
    one takes its place.
    """

    def __init__(
        self,
        current: dict[WorkRef, int] | None = None,
        config: ProgressConfig | None = None,
    ):
        self.config = config or ProgressConfig()
        self._current: dict[WorkRef, int] = {
            ref: validate_percent(pct) for ref, pct in (current or {}).items()
        }
        self._entries: list[ProgressEntry] = []
        self._drafts: dict[WorkRef, int] = {}
        self._pending: dict[WorkRef, int] = {}

    def current_percent(self, ref: WorkRef) -> int:
        """Committed percentage of a unit (0 if nothing was ever approved)."""
        return self._current.get(ref, 0)

    def work_percent(self, work_id: int, sections_count: int) -> int:
        """Committed work-level percentage; mean of sections for multi-section works."""
        return aggregate_section_progress(
            self.current_percent(ref) for ref in section_refs(work_id, sections_count)
        )

    def pending(self, ref: WorkRef) -> ProgressEntry | None:
        """The submitted entry awaiting a decision, if any."""
        index = self._pending.get(ref)
        return self._entries[index] if index is not None else None

    def draft_percent(self, ref: WorkRef) -> int | None:
        """Locally edited value not yet submitted."""
        return self._drafts.get(ref)

    def history(self, work_id: int) -> list[ProgressEntry]:
        """Every submitted/decided entry of a work and its sections, oldest first."""
        return [e for e in self._entries if e.work.work_id == work_id]

    def draft(self, ref: WorkRef, percent: int) -> None:
        """Record a local edit. Replaces an earlier draft of the same unit."""
        self._drafts[ref] = validate_percent(percent)

    def submit(
        self, ref: WorkRef, percent: int | None = None, submitted_by: str | None = None
    ) -> ProgressEntry:
        """Send a percentage for approval.

        Args:
            ref: Work or section
            percent: Value to submit; defaults to the current draft
            submitted_by: Who submitted it

        Raises:
            SubmissionConflictError: If a submission is already awaiting approval
                and the conflict policy is ``reject``
            InvalidTransitionError: If there is neither a percent nor a draft
            InvalidPercentageError: If percent is outside 0-100
        """
        if percent is None:
            percent = self._drafts.get(ref)
            if percent is None:
                raise InvalidTransitionError(f"Nothing to submit for {ref}")
        validate_percent(percent)

        outstanding = self.pending(ref)
        if outstanding is not None:
            if self.config.submission_conflict == SubmissionConflictPolicy.REJECT:
                raise SubmissionConflictError(
                    f"Progress for {ref} is already awaiting approval ({outstanding.percent}%)"
                )
            self._decide(ref, SubmissionStatus.SUPERSEDED, submitted_by)
            logger.changes(f"Progress {ref}: {outstanding.percent}% superseded")

        entry = self._append(ref, percent, SubmissionStatus.SUBMITTED, submitted_by=submitted_by)
        self._pending[ref] = entry.id - 1
        self._drafts.pop(ref, None)
        logger.changes(f"Progress {ref}: {percent}% submitted")
        return entry

    def approve(self, ref: WorkRef, decided_by: str | None = None) -> ProgressEntry:
        """Commit the submitted percentage as the unit's current value.

        Raises:
            InvalidTransitionError: If nothing is awaiting approval
        """
        entry = self._decide(ref, SubmissionStatus.APPROVED, decided_by)
        self._current[ref] = entry.percent
        logger.changes(f"Progress {ref}: {entry.percent}% approved")
        return entry

    def reject(self, ref: WorkRef, decided_by: str | None = None) -> ProgressEntry:
        """Discard the submitted percentage, leaving the prior value intact.

        Raises:
            InvalidTransitionError: If nothing is awaiting approval
        """
        entry = self._decide(ref, SubmissionStatus.REJECTED, decided_by)
        logger.changes(f"Progress {ref}: {entry.percent}% rejected")
        return entry

    def _decide(
        self, ref: WorkRef, status: SubmissionStatus, decided_by: str | None
    ) -> ProgressEntry:
        index = self._pending.pop(ref, None)
        if index is None:
            raise InvalidTransitionError(f"No submitted progress for {ref} to {status.value}")
        decided = replace(
            self._entries[index], status=status, decided_by=decided_by, decided_at=_now()
        )
        self._entries[index] = decided
        return decided

    def _append(
        self,
        ref: WorkRef,
        percent: int,
        status: SubmissionStatus,
        submitted_by: str | None = None,
    ) -> ProgressEntry:
        entry = ProgressEntry(
            id=len(self._entries) + 1,
            work=ref,
            percent=percent,
            status=status,
            submitted_by=submitted_by,
        )
        self._entries.append(entry)
        return entry
