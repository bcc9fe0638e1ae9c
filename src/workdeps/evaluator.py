"""Constraint evaluator.

Computes the earliest date a dependent work may actually start (or finish)
given its predecessor edges and each predecessor's plan/actual dates.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .config import EvaluatorConfig
from .logger import debug_enabled, get_logger
from .models import (
    Anomaly,
    AnomalyKind,
    BindingConstraint,
    ConstraintInput,
    ConstraintResult,
    ScheduleDates,
    Side,
    WorkRef,
)

logger = get_logger()

_UNKNOWN_WORK = WorkRef(0)


class ConstraintEvaluator:
    """Derives minimum permissible dates from predecessor constraints.

    Per predecessor, by dependency type (lag is a signed calendar-day offset):

    - FS: predecessor finish + lag bounds the dependent's start
    - SS: predecessor start + lag bounds the dependent's start
    - FF: predecessor finish + lag bounds the dependent's finish
    - SF: predecessor start + lag bounds the dependent's finish

    "Start"/"finish" of a predecessor means its actual date, falling back to
    the planned one. Finish-side bounds are moved to the start side (and
    vice versa) with the dependent's planned duration; when that duration is
    unknown the predecessor contributes no bound on the other side.

    The result is the latest bound over all predecessors. A predecessor with
    no usable date contributes nothing; it is never treated as "today".
    """

    def __init__(self, config: EvaluatorConfig | None = None):
        self.config = config or EvaluatorConfig()

    def evaluate_start(
        self,
        constraints: Iterable[ConstraintInput],
        own_dates: ScheduleDates | None = None,
        work: WorkRef | None = None,
    ) -> ConstraintResult:
        """Compute the minimum permissible actual start of a work.

        Args:
            constraints: Predecessor edges joined with predecessor dates
            own_dates: The dependent work's own dates (for planned duration)
            work: The dependent work, for reporting

        Returns:
            ConstraintResult whose ``minimum_date`` is None when unconstrained
        """
        return self._evaluate(Side.START, constraints, own_dates, work)

    def evaluate_finish(
        self,
        constraints: Iterable[ConstraintInput],
        own_dates: ScheduleDates | None = None,
        work: WorkRef | None = None,
    ) -> ConstraintResult:
        """Compute the minimum permissible actual finish of a work.

        Besides predecessor bounds, a recorded actual start of the work itself
        is a lower bound on its finish.
        """
        result = self._evaluate(Side.FINISH, constraints, own_dates, work)
        actual_start = own_dates.actual_start if own_dates else None
        if actual_start is not None and (
            result.minimum_date is None or actual_start > result.minimum_date
        ):
            logger.checks(f"  {result.work}: own actual start {actual_start} bounds the finish")
            result.minimum_date = actual_start
            result.binding = None
        return result

    def _evaluate(
        self,
        side: Side,
        constraints: Iterable[ConstraintInput],
        own_dates: ScheduleDates | None,
        work: WorkRef | None,
    ) -> ConstraintResult:
        ordered = sorted(constraints, key=lambda c: c.edge.id)
        ref = work or (ordered[0].edge.work if ordered else _UNKNOWN_WORK)
        own = own_dates or ScheduleDates()
        result = ConstraintResult(work=ref, side=side, minimum_date=None)

        if own.plan_order_invalid or own.actual_order_invalid:
            self._flag(
                result,
                Anomaly(
                    kind=AnomalyKind.INVALID_DATE_ORDER,
                    ref=ref,
                    message=f"Work {ref} has start after end; its duration is treated as unknown",
                ),
            )

        for constraint in ordered:
            bound = self._bound_for(side, constraint, own, result)
            if bound is None:
                continue
            contribution = BindingConstraint(edge=constraint.edge, bound=bound, side=side)
            result.contributions.append(contribution)
            if debug_enabled():
                logger.debug(f"    {constraint.edge}: {side.value} >= {bound}")
            if result.minimum_date is None or bound > result.minimum_date:
                result.minimum_date = bound
                result.binding = contribution

        if result.binding is not None:
            logger.checks(
                f"  {ref}: minimum actual {side.value} {result.minimum_date} "
                f"(binding {result.binding.edge})"
            )
        else:
            logger.checks(f"  {ref}: actual {side.value} unconstrained")
        return result

    def _bound_for(
        self,
        side: Side,
        constraint: ConstraintInput,
        own: ScheduleDates,
        result: ConstraintResult,
    ) -> date | None:
        edge = constraint.edge
        pred = constraint.predecessor_dates or ScheduleDates()

        if pred.plan_order_invalid or pred.actual_order_invalid:
            self._flag(
                result,
                Anomaly(
                    kind=AnomalyKind.INVALID_DATE_ORDER,
                    ref=edge.depends_on,
                    message=f"Predecessor {edge.depends_on} has start after end",
                    edge_id=edge.id,
                ),
            )

        anchor = self._anchor(pred, uses_finish=edge.type.predecessor_uses_finish)
        if anchor is None:
            endpoint = "finish" if edge.type.predecessor_uses_finish else "start"
            self._flag(
                result,
                Anomaly(
                    kind=AnomalyKind.MISSING_PREDECESSOR_DATA,
                    ref=edge.depends_on,
                    message=f"Predecessor {edge.depends_on} has no {endpoint} date",
                    edge_id=edge.id,
                ),
            )
            return None

        bound = anchor + timedelta(days=edge.lag_days)
        bound_side = Side.FINISH if edge.type.constrains_finish else Side.START
        if bound_side == side:
            return bound

        if not self.config.propagate_across_sides:
            return None
        duration = own.planned_duration_days
        if duration is None:
            self._flag(
                result,
                Anomaly(
                    kind=AnomalyKind.UNKNOWN_DURATION,
                    ref=edge.work,
                    message=(
                        f"{edge.type.value} bound from {edge.depends_on} needs the planned "
                        f"duration of {edge.work}, which is unknown"
                    ),
                    edge_id=edge.id,
                ),
            )
            return None
        if side == Side.START:
            return bound - timedelta(days=duration)
        return bound + timedelta(days=duration)

    def _anchor(self, dates: ScheduleDates, *, uses_finish: bool) -> date | None:
        if self.config.use_planned_fallback:
            return dates.effective_finish if uses_finish else dates.effective_start
        return dates.actual_end if uses_finish else dates.actual_start

    @staticmethod
    def _flag(result: ConstraintResult, anomaly: Anomaly) -> None:
        if anomaly not in result.anomalies:
            result.anomalies.append(anomaly)
            logger.checks(f"  Anomaly ({anomaly.kind.value}): {anomaly.message}")


def minimum_actual_start(
    constraints: Iterable[ConstraintInput],
    own_dates: ScheduleDates | None = None,
    config: EvaluatorConfig | None = None,
) -> date | None:
    """Minimum permissible actual start, or None if unconstrained."""
    return ConstraintEvaluator(config).evaluate_start(constraints, own_dates).minimum_date


def minimum_actual_finish(
    constraints: Iterable[ConstraintInput],
    own_dates: ScheduleDates | None = None,
    config: EvaluatorConfig | None = None,
) -> date | None:
    """Minimum permissible actual finish, or None if unconstrained."""
    return ConstraintEvaluator(config).evaluate_finish(constraints, own_dates).minimum_date
