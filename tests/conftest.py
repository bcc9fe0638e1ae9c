"""Pytest configuration and fixtures for workdeps tests."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from workdeps.logger import reset_logger
from workdeps.models import ScheduleDates

BASE_DATE = date(2025, 3, 1)

SAMPLE_PROJECT = """
project:
  id: 7
  name: Tower A
works:
  10:
    name: Excavation
    plan_start: 2025-03-03
    plan_end: 2025-03-10
    actual_start: 2025-03-03
    actual_end: 2025-03-12
    progress: 100
  20:
    name: Foundation
    plan_start: 2025-03-12
    plan_end: 2025-03-20
    progress: 40
  30:
    name: Frame
    sections: 3
    plan_start: 2025-03-21
    plan_end: 2025-04-30
    section_dates:
      1: {plan_start: 2025-03-21, plan_end: 2025-04-01, progress: 0}
      2: {plan_start: 2025-04-02, plan_end: 2025-04-15, progress: 50}
      3: {plan_start: 2025-04-16, plan_end: 2025-04-30, progress: 100}
  40:
    name: Roofing
dependencies:
  - work: 20
    depends_on: 10
    type: FS
    lag: 2
  - work: 30/1
    depends_on: 20
    type: SS
  - work: 30/2
    depends_on: 30/1
    lag: 1
holidays:
  - 2025-03-08
"""


def day(n: int) -> date:
    """Day ``n`` of the test calendar (day 0 is BASE_DATE)."""
    return BASE_DATE + timedelta(days=n)


def dates(
    plan_start: int | None = None,
    plan_end: int | None = None,
    actual_start: int | None = None,
    actual_end: int | None = None,
) -> ScheduleDates:
    """Build ScheduleDates from day offsets."""
    return ScheduleDates(
        plan_start=day(plan_start) if plan_start is not None else None,
        plan_end=day(plan_end) if plan_end is not None else None,
        actual_start=day(actual_start) if actual_start is not None else None,
        actual_end=day(actual_end) if actual_end is not None else None,
    )


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset logger state before each test for isolation."""
    reset_logger()


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """Write the sample project to a temporary file."""
    path = tmp_path / "project.yaml"
    path.write_text(SAMPLE_PROJECT, encoding="utf-8")
    return path
