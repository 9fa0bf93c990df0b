"""
Daylog Backend — Diary Service
================================

What:  One diary entry per user per calendar day: listing and upsert.
Who:   Called by the /api/diaries route handlers.

Upsert:
    The entry date is normalized to midnight of its calendar day (display
    zone), then written with a single statement:

        INSERT INTO diaries (...) VALUES (...)
        ON CONFLICT ON CONSTRAINT uq_diaries_user_date
        DO UPDATE SET mood = EXCLUDED.mood, core_event = EXCLUDED.core_event,
                      reflection = EXCLUDED.reflection, updated_at = EXCLUDED.updated_at
        RETURNING *

    Concurrent writes for the same day therefore converge on one row; the
    later statement's fields win.
"""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, InvalidArgumentError
from app.models.diary import Diary
from app.schemas.diary import DiaryResponse, DiaryUpsert
from app.utils.timefmt import start_of_day, utcnow

logger = logging.getLogger(__name__)


def _to_response(diary: Diary) -> DiaryResponse:
    return DiaryResponse(
        id=diary.id,
        user_id=diary.user_id,
        date=diary.date,
        mood=diary.mood,
        core_event=diary.core_event,
        reflection=diary.reflection,
        created_at=diary.created_at,
        updated_at=diary.updated_at,
    )


class DiaryService:
    """Business logic layer for diary entries."""

    async def list_diaries(self, db: AsyncSession, user_id: uuid.UUID) -> List[DiaryResponse]:
        """All of the caller's entries, most recent day first."""
        try:
            result = await db.execute(
                select(Diary)
                .where(Diary.user_id == user_id)
                .order_by(desc(Diary.date))
            )
            diaries = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing diaries: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve diary entries. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [_to_response(diary) for diary in diaries]

    async def upsert_diary(
        self, db: AsyncSession, user_id: uuid.UUID, payload: DiaryUpsert
    ) -> DiaryResponse:
        """
        Create or overwrite the caller's entry for the payload's day.

        Omitted core_event / reflection are written as "" even when the day
        already had values.
        mood is stored as sent; only its emptiness is checked after trimming.

        Raises:
            InvalidArgumentError: mood missing or blank (→ 400)
            DatabaseError: store failure (→ 500)
        """
        if payload.mood is None or not payload.mood.strip():
            raise InvalidArgumentError(message="Mood must not be empty", field="mood")

        day = start_of_day(payload.date)
        now = utcnow()

        stmt = pg_insert(Diary).values(
            id=uuid.uuid4(),
            user_id=user_id,
            date=day,
            mood=payload.mood,
            core_event=payload.core_event or "",
            reflection=payload.reflection or "",
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_diaries_user_date",
            set_={
                "mood": stmt.excluded.mood,
                "core_event": stmt.excluded.core_event,
                "reflection": stmt.excluded.reflection,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(Diary)

        try:
            result = await db.execute(stmt, execution_options={"populate_existing": True})
            diary = result.scalar_one()
        except Exception as e:
            logger.error("Database error saving diary: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the diary entry. Please try again.",
                context={"day": day.date().isoformat()},
            )

        logger.info("Diary %s saved for %s", diary.id, day.date().isoformat())
        return _to_response(diary)


diary_service = DiaryService()
