"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ScheduleId wrap UUIDs — never use bare UUID in domain logic
    - All closed value sets (schedule type, priority, time unit) encoded as Enums
    - ScheduleSlot date is "YYYY-MM-DD", time is 24-hour "HH:MM"

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and compare equal to raw strings
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ScheduleId = NewType("ScheduleId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class ScheduleType(str, Enum):
    """Four-way schedule taxonomy — closed set, maps to DB `type` column."""
    MEETING = "meeting"
    REMINDER = "reminder"
    TASK = "task"
    APPOINTMENT = "appointment"


class Priority(str, Enum):
    """Schedule priority. MEDIUM is the semantic default."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimeUnit(str, Enum):
    """Units accepted in quantified relative phrases ("in 3 days")."""
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


SCHEDULE_TYPES: frozenset[str] = frozenset(t.value for t in ScheduleType)
PRIORITIES: frozenset[str] = frozenset(p.value for p in Priority)
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_TIME = "09:00"

# Column widths of the schedules table; longer text cannot be stored
TEXT_FIELD_MAX_LENGTHS: dict[str, int] = {
    "title": 500,
    "location": 500,
    "category": 100,
}


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ScheduleSlot:
    """Absolute calendar position: local wall-clock date and time strings."""
    date: str
    time: str


@dataclass(frozen=True)
class RelativeTimeMatch:
    """Quantified relative phrase decomposed into amount + unit."""
    amount: int
    unit: TimeUnit
