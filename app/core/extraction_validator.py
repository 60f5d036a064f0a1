"""Extraction Validation — structural checks a candidate must pass before it may be stored.

Invariants:
    - validate_schedule_extraction is PURE: returns a failure descriptor or None, never mutates
    - Checks run in a fixed order and short-circuit on the first failure
    - Required-field check precedes enum checks, enum checks precede format checks
    - date/time checks are syntactic only — "2024-02-30" passes
    - Absent priority is valid; the "medium" default is NOT injected here
    - title/location/category never exceed their storage column widths

Design Decisions:
    - Failure descriptor as dict (status/error_code/field/message), mirroring the other
      core validators — the shell decides whether to raise or report
    - fullmatch + ASCII flag: "$" would accept a trailing newline and \\d would accept
      non-ASCII digits
"""

import re
from collections.abc import Mapping

from app.core.domain_types import (
    PRIORITIES, SCHEDULE_TYPES, TEXT_FIELD_MAX_LENGTHS,
)

REQUIRED_FIELDS: tuple[str, ...] = ("type", "title", "date", "time")
TEXT_FIELDS: tuple[str, ...] = ("title", "description", "location", "category")

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_TIME_PATTERN = re.compile(r"\d{2}:\d{2}", re.ASCII)


def validate_schedule_extraction(candidate: object) -> dict | None:
    """Validate a candidate record. None when valid, failure descriptor otherwise."""
    if not isinstance(candidate, Mapping):
        return _failure(
            "NOT_AN_OBJECT", None,
            f"Candidate must be an object, got {type(candidate).__name__}",
        )

    for name in REQUIRED_FIELDS:
        if not candidate.get(name):
            return _failure(
                "MISSING_FIELD", name, f"Missing required field: {name}",
            )

    schedule_type = candidate["type"]
    if not isinstance(schedule_type, str) or schedule_type not in SCHEDULE_TYPES:
        return _failure(
            "INVALID_TYPE", "type", f"Invalid type: {schedule_type}",
        )

    priority = candidate.get("priority")
    if priority and (
        not isinstance(priority, str) or priority not in PRIORITIES
    ):
        return _failure(
            "INVALID_PRIORITY", "priority", f"Invalid priority: {priority}",
        )

    if not _matches(_DATE_PATTERN, candidate["date"]):
        return _failure(
            "INVALID_DATE_FORMAT", "date",
            f"Invalid date format: {candidate['date']}",
        )

    if not _matches(_TIME_PATTERN, candidate["time"]):
        return _failure(
            "INVALID_TIME_FORMAT", "time",
            f"Invalid time format: {candidate['time']}",
        )

    return _validate_optional_fields(candidate)


def _validate_optional_fields(candidate: Mapping) -> dict | None:
    """Type and length checks for optional fields, run after the ordered core checks."""
    for name in TEXT_FIELDS:
        value = candidate.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            return _failure(
                "INVALID_FIELD_TYPE", name, f"{name} must be text",
            )
        max_length = TEXT_FIELD_MAX_LENGTHS.get(name)
        if max_length is not None and len(value) > max_length:
            return _failure(
                "FIELD_TOO_LONG", name,
                f"{name} exceeds {max_length} characters",
            )

    duration = candidate.get("duration")
    if duration is not None and (
        isinstance(duration, bool)
        or not isinstance(duration, int)
        or duration <= 0
    ):
        return _failure(
            "INVALID_DURATION", "duration",
            f"Invalid duration: {duration} (positive minutes expected)",
        )

    participants = candidate.get("participants")
    if participants is not None and (
        not isinstance(participants, list)
        or not all(isinstance(p, str) for p in participants)
    ):
        return _failure(
            "INVALID_PARTICIPANTS", "participants",
            "participants must be a list of names",
        )

    metadata = candidate.get("metadata")
    if metadata is not None and not isinstance(metadata, Mapping):
        return _failure(
            "INVALID_METADATA", "metadata", "metadata must be an object",
        )

    return None


def _matches(pattern: re.Pattern, value: object) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def _failure(error_code: str, field: str | None, message: str) -> dict:
    return {
        "status": "error",
        "error_code": error_code,
        "field": field,
        "message": message,
    }
