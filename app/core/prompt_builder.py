"""Extraction Prompt Builder — instruction text sent to the model for one user prompt.

Invariants:
    - Pure string construction: never calls the model, never reads the clock
    - Reference date/time always embedded — the model has no other notion of "now"
    - Field contract (names, enums, formats) derived from domain_types, not duplicated
    - Relative-time arithmetic requested as a hint only; relative_time.py overrides it

Design Decisions:
    - Single module-level template + .format(): one place to review wording changes
    - Enum lists rendered from ScheduleType/Priority so the prompt cannot drift from validation
"""

from app.core.domain_types import (
    DEFAULT_PRIORITY, DEFAULT_TIME, Priority, ScheduleSlot, ScheduleType,
)


def build_extraction_prompt(user_prompt: str, reference: ScheduleSlot) -> str:
    """Build the model instruction for user_prompt at the reference slot."""
    return _PROMPT_TEMPLATE.format(
        current_date=reference.date,
        current_time=reference.time,
        types="|".join(t.value for t in ScheduleType),
        priorities="|".join(p.value for p in Priority),
        default_time=DEFAULT_TIME,
        default_priority=DEFAULT_PRIORITY.value,
        user_prompt=user_prompt,
    )


_PROMPT_TEMPLATE = """You are an AI scheduling assistant. Analyze the user prompt below and extract scheduling information.

CURRENT DATE AND TIME: {current_date} {current_time}
Treat this as "now" when interpreting relative phrases such as "in 2 minutes", "in 3 hours", "tomorrow" or "next week".

Return ONLY a valid JSON object with the following structure:

{{
  "type": "{types}",
  "title": "Brief descriptive title",
  "description": "Optional detailed description",
  "date": "YYYY-MM-DD format",
  "time": "HH:MM format (24-hour)",
  "duration": number (in minutes, optional),
  "participants": ["array of participant names", "optional"],
  "location": "location string, optional",
  "priority": "{priorities}",
  "category": "category string, optional",
  "metadata": {{}}
}}

Rules:
1. Use {current_date} {current_time} as the current date and time.
2. If the prompt contains a relative time phrase ("in 2 minutes", "in 1 hour", "3 days from now"), calculate the actual date and time from the current date and time.
3. If no specific date is mentioned, use today's date ({current_date}).
4. If no specific time is mentioned, use {default_time}.
5. Duration must be in minutes.
6. Priority must be "{default_priority}" unless explicitly stated otherwise.
7. Infer the type from context:
   - "meeting" for meetings with other people
   - "reminder" for personal reminders
   - "task" for to-do items
   - "appointment" for scheduled appointments or bookings
8. Extract participant names and the location when they are mentioned.
9. Return ONLY the JSON object, with no additional text.

User prompt: "{user_prompt}"

JSON Response:"""
