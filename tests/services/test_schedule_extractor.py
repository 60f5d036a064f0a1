"""ScheduleExtractor — end-to-end pipeline over a scripted model.

Invariants:
    - One model call per extract(), prompt carries the reference date/time
    - Quantified relative phrases in the user prompt override model date/time
    - Qualitative phrases ("tomorrow") leave the model's values untouched
    - Each failure mode surfaces as its own ExtractionError subclass

Design Decisions:
    - Clock injected: reference instant fixed at 2024-01-15 08:50
"""

import json
from datetime import datetime

import pytest

from app.core.domain_types import Priority, ScheduleType
from app.core.errors import (
    ExtractionError,
    MalformedReplyError,
    ModelCallFailedError,
    NoStructuredReplyError,
    SchemaInvalidError,
)
from app.services.schedule_extractor import (
    ScheduleExtractor, apply_relative_override,
)

from tests.services.fake_model import FakeTextModel

REFERENCE = datetime(2024, 1, 15, 8, 50)


def _reply(**fields) -> str:
    record = {
        "type": "reminder",
        "title": "Call Sarah",
        "date": "2024-01-15",
        "time": "09:00",
    }
    record.update(fields)
    return json.dumps(record)


def _extractor(*replies) -> tuple[ScheduleExtractor, FakeTextModel]:
    model = FakeTextModel(replies)
    return ScheduleExtractor(model, clock=lambda: REFERENCE), model


async def test_relative_phrase_overrides_model_time():
    extractor, _ = _extractor(f"Sure! {_reply()}")
    extraction = await extractor.extract(
        "remind me to call Sarah in 30 minutes",
    )
    assert extraction.type is ScheduleType.REMINDER
    assert extraction.title == "Call Sarah"
    assert extraction.date == "2024-01-15"
    assert extraction.time == "09:20"


async def test_override_repairs_invalid_model_time():
    extractor, _ = _extractor(_reply(date="soon", time="later"))
    extraction = await extractor.extract("stretch in 2 hours")
    assert (extraction.date, extraction.time) == ("2024-01-15", "10:50")


async def test_qualitative_phrase_keeps_model_values():
    extractor, _ = _extractor(_reply(date="2024-01-16", time="12:00"))
    extraction = await extractor.extract("lunch with Bob tomorrow")
    assert (extraction.date, extraction.time) == ("2024-01-16", "12:00")


async def test_absolute_prompt_keeps_model_values():
    extractor, _ = _extractor(_reply(
        type="meeting", title="Team sync", date="2024-02-01", time="10:00",
        duration=45, participants=["Ana", "Raj"], priority="high",
    ))
    extraction = await extractor.extract(
        "team sync with Ana and Raj on Feb 1 at 10am for 45 minutes, urgent",
    )
    assert extraction.date == "2024-02-01"
    assert extraction.duration == 45
    assert extraction.participants == ["Ana", "Raj"]
    assert extraction.priority is Priority.HIGH


async def test_prompt_sent_to_model_carries_reference():
    extractor, model = _extractor(_reply())
    await extractor.extract("call Sarah")
    assert len(model.prompts) == 1
    assert "CURRENT DATE AND TIME: 2024-01-15 08:50" in model.prompts[0]
    assert 'User prompt: "call Sarah"' in model.prompts[0]


async def test_missing_priority_left_absent():
    extractor, _ = _extractor(_reply())
    extraction = await extractor.extract("call Sarah")
    assert extraction.priority is None


async def test_reply_without_object_raises_no_structured_reply():
    extractor, _ = _extractor("I'm not sure what you mean.")
    with pytest.raises(NoStructuredReplyError):
        await extractor.extract("asdf")


async def test_undecodable_object_raises_malformed_reply():
    extractor, _ = _extractor("{type: reminder}")
    with pytest.raises(MalformedReplyError):
        await extractor.extract("call Sarah")


async def test_bad_time_format_raises_schema_invalid():
    extractor, _ = _extractor(_reply(time="9:00"))
    with pytest.raises(SchemaInvalidError) as exc_info:
        await extractor.extract("call Sarah at nine")
    assert exc_info.value.field == "time"
    assert exc_info.value.reason == "Invalid time format: 9:00"


async def test_unknown_type_raises_schema_invalid():
    extractor, _ = _extractor(_reply(type="birthday"))
    with pytest.raises(SchemaInvalidError) as exc_info:
        await extractor.extract("Sarah's birthday")
    assert exc_info.value.field == "type"


async def test_override_does_not_rescue_missing_title():
    extractor, _ = _extractor(_reply(title=""))
    with pytest.raises(SchemaInvalidError):
        await extractor.extract("something in 5 minutes")


async def test_model_exception_wrapped_as_model_call_failed():
    extractor, _ = _extractor(ConnectionError("network down"))
    with pytest.raises(ModelCallFailedError) as exc_info:
        await extractor.extract("call Sarah")
    assert exc_info.value.http_status == 503
    assert exc_info.value.to_response()["error"]["message"] == (
        "Schedule model unavailable"
    )


async def test_typed_model_failure_passes_through():
    original = ModelCallFailedError("API timeout", "timeout")
    extractor, _ = _extractor(original)
    with pytest.raises(ModelCallFailedError) as exc_info:
        await extractor.extract("call Sarah")
    assert exc_info.value is original


async def test_failures_share_extraction_base():
    extractor, _ = _extractor("no braces here")
    with pytest.raises(ExtractionError):
        await extractor.extract("call Sarah")


async def test_extractor_is_reusable_across_calls():
    extractor, model = _extractor(_reply(), _reply(title="Water plants"))
    first = await extractor.extract("call Sarah")
    second = await extractor.extract("water plants in 1 day")
    assert first.title == "Call Sarah"
    assert (second.title, second.date) == ("Water plants", "2024-01-16")
    assert len(model.prompts) == 2


# -- apply_relative_override ---------------------------------------------------


def test_override_reports_when_applied():
    candidate = {"date": "x", "time": "y"}
    assert apply_relative_override(candidate, "in 3 days", REFERENCE)
    assert candidate == {"date": "2024-01-18", "time": "08:50"}


def test_override_skipped_without_quantified_phrase():
    candidate = {"date": "2024-01-16", "time": "09:00"}
    assert not apply_relative_override(candidate, "tomorrow", REFERENCE)
    assert candidate == {"date": "2024-01-16", "time": "09:00"}


async def test_overlong_title_raises_schema_invalid():
    extractor, _ = _extractor(_reply(title="t" * 600, category="c" * 300))
    with pytest.raises(SchemaInvalidError) as exc_info:
        await extractor.extract("call Sarah")
    assert exc_info.value.field == "title"


async def test_unclosed_template_brace_before_reply_object():
    extractor, _ = _extractor(f"Format is {{type, title ...\nHere: {_reply()}")
    extraction = await extractor.extract("call Sarah")
    assert extraction.title == "Call Sarah"
