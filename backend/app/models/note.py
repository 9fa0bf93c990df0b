"""
Daylog Backend — Note SQLAlchemy Model
========================================

What:  ORM model representing the `notes` table in PostgreSQL.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - user_id: owner, immutable; every query filters on it
    - title: stored trimmed, never empty (enforced by NoteService)
    - images: JSONB array of URL strings, kept in client order
    - created_at / updated_at: UTC with timezone

    Index on (user_id, created_at DESC):
        Serves the default listing, "my notes, newest first".
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Note(Base):
    """A titled text note with attached image URLs, owned by one user."""

    __tablename__ = "notes"

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
        comment="Owning user; immutable",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    # Mutations assign a new list; in-place appends are not change-tracked
    images: Mapped[List[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
        comment="Ordered list of image URLs",
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
        Index("idx_notes_user_created_at", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title='{self.title[:20]}')>"
