"""Relative-Time Resolution — turns "in 2 minutes" / "3 days from now" into absolute slots.

Invariants:
    - has_relative_expression detects quantified AND qualitative phrases
      ("tomorrow", "next week", "next month", "next year")
    - extract_relative_expression returns ONLY quantified phrases — qualitative
      phrases carry no offset and are left to the model
    - resolve_relative_time never raises: unparseable phrase → reference slot unchanged
    - Months/years overflow naturally (Jan 31 + 1 month → early March, no clamping)
    - Output is always local wall-clock "YYYY-MM-DD" / "HH:MM"

Design Decisions:
    - Pure functions + injectable clock: deterministic tests without freezing time
    - Month arithmetic via "first of target month + (day - 1) days": reproduces
      rollover instead of the clamping relativedelta would apply
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from app.core.domain_types import RelativeTimeMatch, ScheduleSlot, TimeUnit

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_UNITS = r"(minutes?|hours?|days?|weeks?|months?|years?)"

_IN_PATTERN = re.compile(rf"\bin\s+(\d+)\s+{_UNITS}\b", re.IGNORECASE)
_FROM_NOW_PATTERN = re.compile(
    rf"\b(\d+)\s+{_UNITS}\s+from\s+now\b", re.IGNORECASE,
)
_QUALITATIVE_PATTERN = re.compile(
    r"\b(tomorrow|next\s+week|next\s+month|next\s+year)\b", re.IGNORECASE,
)
_QUANTITY_PATTERN = re.compile(rf"(\d+)\s+{_UNITS}\b", re.IGNORECASE)

# Order matters: "in N unit" wins over "N unit from now"
_EXTRACTABLE_PATTERNS = (_IN_PATTERN, _FROM_NOW_PATTERN)


def has_relative_expression(text: str) -> bool:
    """True if text contains any supported relative-time phrase."""
    if not text:
        return False
    return any(
        p.search(text)
        for p in (*_EXTRACTABLE_PATTERNS, _QUALITATIVE_PATTERN)
    )


def extract_relative_expression(text: str) -> str | None:
    """Return the first quantified relative phrase in text, or None."""
    if not text:
        return None
    for pattern in _EXTRACTABLE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def parse_relative_expression(phrase: str) -> RelativeTimeMatch | None:
    """Decompose a phrase into amount + unit. None if no positive quantity found."""
    match = _QUANTITY_PATTERN.search(phrase or "")
    if not match:
        return None
    amount = int(match.group(1))
    if amount <= 0:
        return None
    unit = TimeUnit(match.group(2).lower().rstrip("s"))
    return RelativeTimeMatch(amount=amount, unit=unit)


def resolve_relative_time(
    phrase: str, reference: datetime | None = None,
) -> ScheduleSlot:
    """Resolve phrase against reference (defaults to now). Falls back to reference."""
    base = reference if reference is not None else datetime.now()
    parsed = parse_relative_expression(phrase)
    if parsed is None:
        return to_slot(base)
    try:
        return to_slot(apply_offset(base, parsed))
    except (OverflowError, ValueError) as e:
        logger.warning(
            "Relative offset out of calendar range (%s): %s", phrase, e,
        )
        return to_slot(base)


def apply_offset(moment: datetime, offset: RelativeTimeMatch) -> datetime:
    """Add offset.amount units to moment using calendar-aware arithmetic."""
    amount = offset.amount
    match offset.unit:
        case TimeUnit.MINUTE:
            return moment + timedelta(minutes=amount)
        case TimeUnit.HOUR:
            return moment + timedelta(hours=amount)
        case TimeUnit.DAY:
            return moment + timedelta(days=amount)
        case TimeUnit.WEEK:
            return moment + timedelta(weeks=amount)
        case TimeUnit.MONTH:
            return _add_months(moment, amount)
        case TimeUnit.YEAR:
            return _add_months(moment, amount * 12)


def _add_months(moment: datetime, months: int) -> datetime:
    """Shift the calendar month; an out-of-range day spills into the next month."""
    total = moment.month - 1 + months
    first_of_month = moment.replace(
        year=moment.year + total // 12, month=total % 12 + 1, day=1,
    )
    return first_of_month + timedelta(days=moment.day - 1)


def to_slot(moment: datetime) -> ScheduleSlot:
    """Format an instant as local wall-clock date/time strings."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return ScheduleSlot(
        date=f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}",
        time=f"{moment.hour:02d}:{moment.minute:02d}",
    )


def current_date_time(clock: Clock | None = None) -> ScheduleSlot:
    """Current reference instant as a ScheduleSlot."""
    return to_slot((clock or datetime.now)())
