"""Core Layer — pure extraction logic: relative time, prompt text, reply parsing, validation.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic given their inputs (the clock is injected)

Design Decisions:
    - Functional core separated from the imperative shell: the model call and
      persistence live in services/ and api/
"""
