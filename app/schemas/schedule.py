"""Schedule Schemas — extraction record, API requests, and responses.

Invariants:
    - ScheduleExtraction is only constructed AFTER validate_schedule_extraction passed
    - ScheduleCreate.prompt: stripped, 1..prompt_max_length chars
    - ScheduleUpdate is partial, but a supplied field must satisfy the same formats/enums
      as extraction; required fields may not be explicitly nulled
    - formatted_date_time is always "<date> at <time>"
    - title/location/category bounded by the schedules column widths on every path

Design Decisions:
    - extra="ignore" on ScheduleExtraction: unknown keys from the model reply are dropped
    - Priority default ("medium") applied at storage time, not on the extraction record
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.config import get_settings
from app.core.domain_types import (
    Priority, ScheduleType, TEXT_FIELD_MAX_LENGTHS,
)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class ScheduleExtraction(BaseModel):
    """Validated structured record produced from one prompt."""
    model_config = ConfigDict(extra="ignore")

    type: ScheduleType
    title: str = Field(max_length=TEXT_FIELD_MAX_LENGTHS["title"])
    description: str | None = None
    date: str
    time: str
    duration: int | None = None
    participants: list[str] | None = None
    location: str | None = Field(
        None, max_length=TEXT_FIELD_MAX_LENGTHS["location"],
    )
    priority: Priority | None = None
    category: str | None = Field(
        None, max_length=TEXT_FIELD_MAX_LENGTHS["category"],
    )
    metadata: dict[str, Any] | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def blank_priority_is_absent(cls, v: Any) -> Any:
        return v or None


class ScheduleCreate(BaseModel):
    """Natural-language prompt to turn into a schedule."""
    prompt: str

    @field_validator("prompt")
    @classmethod
    def strip_prompt(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("prompt cannot be empty or whitespace")
        max_length = get_settings().prompt_max_length
        if len(v) > max_length:
            raise ValueError(f"prompt must be at most {max_length} characters")
        return v


class ScheduleUpdate(BaseModel):
    """Partial update — only supplied fields are written."""
    model_config = ConfigDict(extra="forbid")

    type: ScheduleType | None = None
    title: str | None = Field(
        None, min_length=1, max_length=TEXT_FIELD_MAX_LENGTHS["title"],
    )
    description: str | None = None
    date: str | None = Field(None, pattern=DATE_PATTERN)
    time: str | None = Field(None, pattern=TIME_PATTERN)
    duration: int | None = Field(None, gt=0)
    participants: list[str] | None = None
    location: str | None = Field(
        None, max_length=TEXT_FIELD_MAX_LENGTHS["location"],
    )
    priority: Priority | None = None
    category: str | None = Field(
        None, max_length=TEXT_FIELD_MAX_LENGTHS["category"],
    )
    metadata: dict[str, Any] | None = None

    @model_validator(mode="after")
    def required_fields_not_nulled(self):
        for name in ("type", "title", "date", "time", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ScheduleResponse(BaseModel):
    """Stored schedule as returned by the API."""
    id: UUID
    user_id: UUID | None = None
    type: ScheduleType
    title: str
    description: str | None = None
    date: str
    time: str
    duration: int | None = None
    participants: list[str] | None = None
    location: str | None = None
    priority: Priority
    category: str | None = None
    metadata: dict[str, Any] | None = None
    ai_prompt: str
    formatted_date_time: str
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class ScheduleListResponse(BaseModel):
    """Paginated listing, newest first."""
    schedules: list[ScheduleResponse]
    pagination: Pagination


class ScheduleQueryResponse(BaseModel):
    """Unpaginated filtered listing (date range, type), ordered by date then time."""
    schedules: list[ScheduleResponse]
    count: int
