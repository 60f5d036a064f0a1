"""Services Layer — orchestration around the pure core (model call, extraction).

Invariants:
    - Services receive collaborators via constructor injection (no lazy singletons)
    - Services never touch HTTP request/response objects

Design Decisions:
    - One service per concern for locality
"""
