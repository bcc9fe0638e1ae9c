"""Schedule dependency engine for construction work tracking.

Main entry points:
- DependencyService: create/update/delete dependencies and evaluate minimum dates
- DependencyGraph: per project edge store with transactional cycle checks
- ConstraintEvaluator: minimum permissible actual start/finish dates
- disabled_dates: date-picker exclusion predicate
- aggregate_section_progress: work-level completion of multi-section works
- ProgressLedger: draft/submit/approve/reject workflow for percentages
"""

from .config import CalendarConfig, EngineConfig, EvaluatorConfig, ProgressConfig, load_config
from .dates import HolidayCalendar, calendar_days_between, count_workdays, is_weekend, is_workday
from .evaluator import ConstraintEvaluator, minimum_actual_finish, minimum_actual_start
from .exceptions import (
    CycleError,
    DuplicateDependencyError,
    MissingReferenceError,
    SelfReferenceError,
    StaleGraphError,
    SubmissionConflictError,
    WorkdepsError,
)
from .graph import DependencyGraph
from .loader import load_project
from .models import (
    ConstraintInput,
    ConstraintResult,
    DependencyEdge,
    DependencyType,
    ProjectScope,
    ScheduleDates,
    WorkRef,
)
from .progress import ProgressLedger, SubmissionStatus
from .project import Project
from .projector import DisabledDates, disabled_dates
from .sections import SectionedWork, aggregate_section_progress
from .service import DependencyService

__all__ = [
    # Models
    "WorkRef",
    "ScheduleDates",
    "DependencyType",
    "DependencyEdge",
    "ConstraintInput",
    "ConstraintResult",
    "ProjectScope",
    # Graph and evaluation
    "DependencyGraph",
    "ConstraintEvaluator",
    "minimum_actual_start",
    "minimum_actual_finish",
    "DisabledDates",
    "disabled_dates",
    # Sections and progress
    "SectionedWork",
    "aggregate_section_progress",
    "ProgressLedger",
    "SubmissionStatus",
    # Service and loading
    "DependencyService",
    "Project",
    "load_project",
    # Dates
    "HolidayCalendar",
    "calendar_days_between",
    "count_workdays",
    "is_weekend",
    "is_workday",
    # Configuration
    "EngineConfig",
    "CalendarConfig",
    "EvaluatorConfig",
    "ProgressConfig",
    "load_config",
    # Errors
    "WorkdepsError",
    "CycleError",
    "SelfReferenceError",
    "MissingReferenceError",
    "DuplicateDependencyError",
    "StaleGraphError",
    "SubmissionConflictError",
]
