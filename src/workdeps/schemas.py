"""Pydantic schemas for project YAML data validation."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import DependencyType


class SectionSchema(BaseModel):
    """Schema for one section of a multi-section work."""

    plan_start: date | None = None
    plan_end: date | None = None
    actual_start: date | None = None
    actual_end: date | None = None
    progress: int = Field(default=0, ge=0, le=100)


class WorkSchema(SectionSchema):
    """Schema for a work item."""

    name: str = ""
    sections: int = Field(default=1, ge=1)
    section_dates: dict[int, SectionSchema] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_section_numbers(self) -> WorkSchema:
        """Ensure per-section data only names existing sections."""
        for number in self.section_dates:
            if not 1 <= number <= self.sections:
                raise ValueError(f"section {number} is outside 1..{self.sections}")
        return self


class DependencySchema(BaseModel):
    """Schema for a dependency entry."""

    id: int | None = None
    work: str
    depends_on: str
    type: DependencyType = DependencyType.FS
    lag: int = 0

    @field_validator("work", "depends_on", mode="before")
    @classmethod
    def coerce_ref_to_string(cls, v: Any) -> str:
        """Allow plain integer work ids."""
        return str(v)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        """Accept lower-case relationship kinds."""
        return v.upper() if isinstance(v, str) else v


class ProjectInfoSchema(BaseModel):
    """Schema for project identity."""

    id: int = 1
    name: str = ""


class ProjectSchema(BaseModel):
    """Schema for the entire project YAML data."""

    project: ProjectInfoSchema = Field(default_factory=ProjectInfoSchema)
    works: dict[int, WorkSchema] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)
    holidays: list[date] = Field(default_factory=list)

    @field_validator("works", mode="before")
    @classmethod
    def default_empty_works(cls, v: Any) -> Any:
        """Treat an empty ``works:`` key as no works."""
        return {} if v is None else v
