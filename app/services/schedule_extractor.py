"""Schedule Extractor — prompt → model → parsed, time-corrected, validated ScheduleExtraction.

Invariants:
    - Exactly one model call per extract(); no retries here
    - Reference instant captured ONCE per call and shared by prompt and override
    - A quantified relative phrase in the user prompt ALWAYS overwrites the model's
      date/time, even when the model's values look plausible
    - Candidate is fully valid or rejected: ExtractionError subclasses are terminal
    - validate_schedule_extraction covers every ScheduleExtraction constraint, so
      model_validate never fails on a candidate that passed it
    - Stateless across calls: safe to share one instance between concurrent requests

Design Decisions:
    - Model and clock injected via constructor: built once in the app lifespan after
      settings load (replaces a lazily-created module singleton)
    - Untyped model failures wrapped in ModelCallFailedError; typed ones pass through
"""

import logging
from datetime import datetime

from app.core.boundary_protocols import TextGenerationModel
from app.core.errors import (
    ErrorContext, ExtractionError, ModelCallFailedError, SchemaInvalidError,
)
from app.core.extraction_validator import validate_schedule_extraction
from app.core.prompt_builder import build_extraction_prompt
from app.core.relative_time import (
    Clock,
    extract_relative_expression,
    has_relative_expression,
    resolve_relative_time,
    to_slot,
)
from app.core.reply_parser import parse_model_reply
from app.schemas.schedule import ScheduleExtraction

logger = logging.getLogger(__name__)


class ScheduleExtractor:
    """Turns one natural-language prompt into one validated ScheduleExtraction."""

    def __init__(
        self, model: TextGenerationModel, clock: Clock | None = None,
    ) -> None:
        self.model = model
        self.clock = clock or datetime.now

    async def extract(self, user_prompt: str) -> ScheduleExtraction:
        """Run the pipeline. Raises ExtractionError subclasses on failure."""
        reference = self.clock()
        prompt = build_extraction_prompt(user_prompt, to_slot(reference))
        logger.info(f"Processing schedule prompt: {user_prompt[:100]!r}")

        reply = await self._call_model(prompt)
        logger.debug(f"Raw model reply: {reply!r}")

        candidate = parse_model_reply(reply)
        apply_relative_override(candidate, user_prompt, reference)

        failure = validate_schedule_extraction(candidate)
        if failure:
            logger.warning(
                f"Extraction rejected: {failure['message']}",
                extra={"error_code": failure["error_code"]},
            )
            raise SchemaInvalidError(failure["message"], failure["field"])

        extraction = ScheduleExtraction.model_validate(candidate)

        logger.info(
            f"Extracted schedule: {extraction.title}",
            extra={"schedule_type": extraction.type.value},
        )
        return extraction

    async def _call_model(self, prompt: str) -> str:
        try:
            return await self.model.generate_text(prompt)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Model call failed: {e}", exc_info=True)
            raise ModelCallFailedError(
                str(e), "unknown",
                context=ErrorContext(user_message="Schedule model unavailable"),
            ) from e


def apply_relative_override(
    candidate: dict, user_prompt: str, reference: datetime,
) -> bool:
    """Overwrite candidate date/time from a quantified phrase. True if applied."""
    if not has_relative_expression(user_prompt):
        return False
    phrase = extract_relative_expression(user_prompt)
    if not phrase:
        return False
    slot = resolve_relative_time(phrase, reference)
    logger.info(
        f"Relative time override '{phrase}': "
        f"{candidate.get('date')} {candidate.get('time')} -> {slot.date} {slot.time}",
    )
    candidate["date"] = slot.date
    candidate["time"] = slot.time
    return True
