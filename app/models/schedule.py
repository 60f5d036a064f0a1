"""Schedule ORM — persisted ScheduleExtraction plus its provenance.

Invariants:
    - type ∈ ScheduleType values; priority ∈ Priority values, "medium" when absent
    - date is "YYYY-MM-DD", time is "HH:MM" — stored as strings so lexical order == time order
    - ai_prompt/ai_response keep the originating prompt and the accepted extraction (JSON)
    - user_id NULL means the schedule was created without authentication

Design Decisions:
    - JSON columns for participants/metadata: opaque to queries, stored as-is
    - Python attribute `metadata_` maps to column "metadata" (Declarative reserves `metadata`)
    - Composite indexes (user_id, date) and (type, date) back the date-range and type queries
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.core.domain_types import DEFAULT_PRIORITY, TEXT_FIELD_MAX_LENGTHS
from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Schedule(Base):
    """A stored schedule entry produced from a natural-language prompt."""
    __tablename__ = "schedules"
    __table_args__ = (
        Index("ix_schedules_user_id_date", "user_id", "date"),
        Index("ix_schedules_type_date", "type", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(
        String(TEXT_FIELD_MAX_LENGTHS["title"]), nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    participants: Mapped[list | None] = mapped_column(JSON, nullable=True)
    location: Mapped[str | None] = mapped_column(
        String(TEXT_FIELD_MAX_LENGTHS["location"]), nullable=True,
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default=DEFAULT_PRIORITY.value,
    )
    category: Mapped[str | None] = mapped_column(
        String(TEXT_FIELD_MAX_LENGTHS["category"]), nullable=True,
    )
    metadata_: Mapped[dict | None] = mapped_column(
        "metadata", JSON, nullable=True,
    )
    ai_prompt: Mapped[str] = mapped_column(Text, nullable=False)
    ai_response: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
        onupdate=_utcnow,
    )

    user: Mapped["User | None"] = relationship(
        "User", back_populates="schedules", lazy="noload",
    )

    @property
    def formatted_date_time(self) -> str:
        return f"{self.date} at {self.time}"
