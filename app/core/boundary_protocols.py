"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The language model is a text-in/text-out black box

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: the model call is the pipeline's only suspend point
"""

from typing import Protocol


class TextGenerationModel(Protocol):
    """Contract for the language model collaborator — implemented by infrastructure."""
    async def generate_text(self, prompt: str) -> str: ...
