"""Model Reply Parsing — locates and decodes the structured object in free-form model text.

Invariants:
    - The FIRST balanced {...} span wins; later spans are never considered
    - A "{" that never closes is skipped and the scan restarts at the next "{"
    - Braces inside JSON string literals (including escaped quotes) do not affect balance
    - No span → NoStructuredReplyError; span that fails to decode → MalformedReplyError

Design Decisions:
    - Bracket-balancing scan over a greedy regex: "Sure! {...} Hope that {helps}" must
      yield the first object, not everything between the first "{" and the last "}"
    - Each scan starts at a "{": quotes in leading prose never open a string
"""

import json
import logging

from app.core.errors import MalformedReplyError, NoStructuredReplyError

logger = logging.getLogger(__name__)


def find_json_object(text: str) -> str | None:
    """Return the first balanced {...} span in text, or None."""
    start = text.find("{") if text else -1
    while start >= 0:
        end = _balanced_end(text, start)
        if end is not None:
            return text[start:end + 1]
        start = text.find("{", start + 1)
    return None


def _balanced_end(text: str, start: int) -> int | None:
    """Index of the "}" closing the "{" at start, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def parse_model_reply(text: str) -> dict:
    """Extract and decode the first structured object from a model reply."""
    span = find_json_object(text)
    if span is None:
        logger.warning("Model reply contained no object span")
        raise NoStructuredReplyError()
    try:
        return json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning(f"Model reply object failed to decode: {e}")
        raise MalformedReplyError(str(e)) from e
