"""
Daylog Backend — Habit Service
================================

What:  Habit listing, creation and daily check-in with streak tracking.
Who:   Called by the /api/habits route handlers.

Check-in Algorithm (calendar-day granularity, display zone):
    today = day of now; last = day of the most recent check-in (or none)
    last == today      → DuplicateOperationError, nothing changes
    last == today - 1  → current_streak += 1
    otherwise          → current_streak = 1 (first check-in or any gap)
    max_streak = max(max_streak, current_streak); append now to check_ins

    Only the most recent check-in is inspected. A gap of two days and a gap
    of two months both reset the streak to 1.

Concurrency:
    The habit row is read with SELECT ... FOR UPDATE, so concurrent check-ins
    of one habit run one after the other; the second sees the first's
    check-in and fails as a duplicate.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    DuplicateOperationError,
    InvalidArgumentError,
    NotFoundError,
)
from app.models.habit import DEFAULT_FREQUENCY, DEFAULT_TARGET, Habit
from app.schemas.habit import HabitCreate, HabitResponse
from app.utils.ids import parse_resource_id
from app.utils.timefmt import calendar_day, utcnow

logger = logging.getLogger(__name__)


def next_streak(current_streak: int, last_day: Optional[date], today: date) -> int:
    """Streak after checking in on `today`, given the day of the previous check-in."""
    if last_day is not None and last_day == today - timedelta(days=1):
        return current_streak + 1
    return 1


def _to_response(habit: Habit) -> HabitResponse:
    return HabitResponse(
        id=habit.id,
        user_id=habit.user_id,
        name=habit.name,
        frequency=habit.frequency,
        target=habit.target,
        current_streak=habit.current_streak,
        max_streak=habit.max_streak,
        check_ins=list(habit.check_ins or []),
        created_at=habit.created_at,
        updated_at=habit.updated_at,
    )


class HabitService:
    """Business logic layer for habits."""

    async def list_habits(self, db: AsyncSession, user_id: uuid.UUID) -> List[HabitResponse]:
        """All of the caller's habits, newest first."""
        try:
            result = await db.execute(
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(desc(Habit.created_at))
            )
            habits = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing habits: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve habits. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [_to_response(habit) for habit in habits]

    async def create_habit(
        self, db: AsyncSession, user_id: uuid.UUID, payload: HabitCreate
    ) -> HabitResponse:
        """
        Create a habit with zeroed streaks.

        name is required (trimmed); empty frequency/target fall back to
        "daily" / "每日".
        """
        if payload.name is None or not payload.name.strip():
            raise InvalidArgumentError(message="Habit name must not be empty", field="name")

        now = utcnow()
        habit = Habit(
            id=uuid.uuid4(),
            user_id=user_id,
            name=payload.name.strip(),
            frequency=payload.frequency or DEFAULT_FREQUENCY,
            target=payload.target or DEFAULT_TARGET,
            current_streak=0,
            max_streak=0,
            check_ins=[],
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(habit)
            await db.flush()
        except Exception as e:
            logger.error("Database error creating habit: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the habit. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Habit %s created", habit.id)
        return _to_response(habit)

    async def check_in(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        habit_id: str,
        now: Optional[datetime] = None,
    ) -> HabitResponse:
        """
        Record today's check-in and update the streak counters.

        Args:
            now: Check-in instant; the current time when omitted.

        Raises:
            InvalidArgumentError: habit_id is not a UUID (→ 400)
            NotFoundError: absent or owned by another user (→ 404)
            DuplicateOperationError: already checked in today (→ 400)
        """
        now = now or utcnow()
        habit = await self._get_owned_for_update(db, user_id, habit_id)

        today = calendar_day(now)
        last_day = calendar_day(habit.check_ins[-1]) if habit.check_ins else None

        if last_day == today:
            raise DuplicateOperationError(
                message="Already checked in today",
                context={"habit_id": habit_id, "day": today.isoformat()},
            )

        habit.current_streak = next_streak(habit.current_streak, last_day, today)
        habit.max_streak = max(habit.max_streak, habit.current_streak)
        # New list so the ARRAY column change is tracked
        habit.check_ins = [*habit.check_ins, now]
        habit.updated_at = now

        try:
            await db.flush()
        except Exception as e:
            logger.error("Database error checking in habit %s: %s", habit_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not record the check-in. Please try again.",
                context={"habit_id": habit_id},
            )

        logger.info(
            "Habit %s checked in: streak=%d max=%d",
            habit.id,
            habit.current_streak,
            habit.max_streak,
        )
        return _to_response(habit)

    async def _get_owned_for_update(
        self, db: AsyncSession, user_id: uuid.UUID, habit_id: str
    ) -> Habit:
        parsed_id = parse_resource_id(habit_id, "habit")
        try:
            result = await db.execute(
                select(Habit)
                .where(Habit.id == parsed_id, Habit.user_id == user_id)
                .with_for_update()
            )
            habit = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching habit %s: %s", habit_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the habit. Please try again.",
                context={"habit_id": habit_id},
            )

        if habit is None:
            raise NotFoundError(resource="habit", resource_id=habit_id)
        return habit


habit_service = HabitService()
