"""
Daylog Backend — Diary SQLAlchemy Model
=========================================

What:  ORM model for the `diaries` table: one mood entry per user per day.
Who:   DiaryService (list, upsert).

`date` holds midnight of the calendar day in the display zone (stored as a
UTC instant). The unique constraint on (user_id, date) is the conflict target
of the upsert.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Diary(Base):
    """A daily diary entry: mood plus optional core event and reflection."""

    __tablename__ = "diaries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        comment="Start of the calendar day this entry belongs to",
    )

    # Mood icon or code chosen by the client
    mood: Mapped[str] = mapped_column(Text, nullable=False)

    core_event: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''"),
    )

    reflection: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_diaries_user_date"),
    )

    def __repr__(self) -> str:
        return f"<Diary(id={self.id}, date='{self.date}', mood='{self.mood}')>"
