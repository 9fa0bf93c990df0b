"""
Daylog Backend — Habit SQLAlchemy Model
=========================================

What:  ORM model for the `habits` table.
Who:   HabitService (list, create, check-in).

Invariants (maintained by HabitService.check_in):
    - max_streak >= current_streak
    - check_ins holds at most one instant per calendar day, in append order
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_FREQUENCY = "daily"
DEFAULT_TARGET = "每日"


class Habit(Base):
    """A habit with its streak counters and check-in history."""

    __tablename__ = "habits"

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

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # e.g. daily, weekly_3, custom
    frequency: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_FREQUENCY,
        server_default=text(f"'{DEFAULT_FREQUENCY}'"),
    )

    target: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_TARGET,
        server_default=text(f"'{DEFAULT_TARGET}'"),
        comment="Free-text goal description",
    )

    current_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )

    max_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )

    check_ins: Mapped[List[datetime]] = mapped_column(
        ARRAY(TIMESTAMP(timezone=True)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="Check-in instants, chronological",
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
        CheckConstraint("current_streak >= 0", name="ck_habits_current_streak"),
        CheckConstraint("max_streak >= current_streak", name="ck_habits_max_streak"),
        Index("idx_habits_user_created_at", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Habit(id={self.id}, name='{self.name}', "
            f"current_streak={self.current_streak}, max_streak={self.max_streak})>"
        )
