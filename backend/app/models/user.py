"""
Daylog Backend — User SQLAlchemy Model
========================================

What:  ORM model for the `users` table: one row per anonymous token.
Who:   Written only by the identity service (insert-if-absent); read by it on
       every authenticated request.

Table Design:
    - anonymous_token UNIQUE: the conflict target of the provisioning upsert,
      so concurrent first requests for one token produce one row
    - No updated_at: users are never mutated after creation
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """An anonymous identity. Created lazily, never updated or deleted."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    anonymous_token: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Client-generated opaque identity string",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, created_at='{self.created_at}')>"
