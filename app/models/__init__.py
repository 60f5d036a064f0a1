"""ORM Models — SQLAlchemy declarative models for users and schedules.

Invariants:
    - All models inherit from Base (db/base.py)
    - Schedules optionally belong to a user; anonymous schedules have user_id NULL

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.schedule import Schedule  # noqa: F401
