"""Fake text model — scripted replies for ScheduleExtractor and route tests.

Replies are consumed in order; an Exception instance in the script is raised
instead of returned. Every prompt sent is recorded in `prompts`.
"""


class FakeTextModel:
    """Satisfies TextGenerationModel without network access."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.prompts: list[str] = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    async def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise RuntimeError("No more scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
