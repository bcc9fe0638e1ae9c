"""Engine configuration.

A single YAML file (``workdeps_config.yaml``) holds the project calendar and
evaluator/progress policy.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import DEFAULT_WEEKEND_DAYS, HolidayCalendar

DEFAULT_CONFIG_NAME = "workdeps_config.yaml"


class Holiday(BaseModel):
    """A single non-working date."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")
    name: str | None = None


class CalendarConfig(BaseModel):
    """Non-working days: weekend weekdays plus explicit holidays."""

    weekend_days: list[int] = Field(default_factory=lambda: sorted(DEFAULT_WEEKEND_DAYS))
    holidays: list[Holiday] = Field(default_factory=list[Holiday])

    @field_validator("weekend_days")
    @classmethod
    def validate_weekend_days(cls, v: list[int]) -> list[int]:
        """Ensure weekend days are ISO weekday numbers."""
        for day in v:
            if not 1 <= day <= 7:  # noqa: PLR2004 - ISO weekday range
                raise ValueError(f"weekend day must be 1 (Monday) .. 7 (Sunday), got {day}")
        return v

    @field_validator("holidays", mode="before")
    @classmethod
    def coerce_plain_dates(cls, v: Any) -> Any:
        """Allow holidays to be given as bare dates."""
        if not isinstance(v, list):
            return v
        items: list[Any] = v
        return [item if isinstance(item, dict) else {"date": item} for item in items]

    def to_calendar(self, extra_holidays: list[date] | None = None) -> HolidayCalendar:
        """Build the calendar used by the date helpers."""
        dates = {h.day for h in self.holidays}
        dates.update(extra_holidays or [])
        return HolidayCalendar.from_dates(dates, self.weekend_days)


class EvaluatorConfig(BaseModel):
    """Constraint evaluator policy."""

    # Fall back to planned dates when a predecessor has no actual date yet
    use_planned_fallback: bool = True
    # Move finish-side bounds (FF/SF) to the start side, and start-side bounds to
    # the finish side, using the dependent's planned duration
    propagate_across_sides: bool = True


class SubmissionConflictPolicy(str, Enum):
    """What to do with a submission while another one awaits approval."""

    REJECT = "reject"
    SUPERSEDE = "supersede"


class ProgressConfig(BaseModel):
    """Progress submission policy."""

    submission_conflict: SubmissionConflictPolicy = SubmissionConflictPolicy.REJECT


class EngineConfig(BaseModel):
    """Root configuration."""

    calendar: CalendarConfig = CalendarConfig()
    evaluator: EvaluatorConfig = EvaluatorConfig()
    progress: ProgressConfig = ProgressConfig()


def load_config(config_path: Path | str) -> EngineConfig:
    """Load engine configuration from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the root level")

    return EngineConfig.model_validate(data)


def discover_config(start_dir: Path | None = None, config_path: Path | None = None) -> EngineConfig:
    """Find and load a config file, or fall back to defaults.

    Search order:
    1. Explicit config_path argument
    2. start_dir / workdeps_config.yaml
    3. Current directory / workdeps_config.yaml
    """
    if config_path is not None:
        return load_config(config_path)

    candidates = [Path(DEFAULT_CONFIG_NAME)]
    if start_dir is not None:
        candidates.insert(0, start_dir / DEFAULT_CONFIG_NAME)

    for candidate in candidates:
        if candidate.exists():
            return load_config(candidate)
    return EngineConfig()
