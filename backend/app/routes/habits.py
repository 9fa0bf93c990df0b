"""
Daylog Backend — Habit Route Handlers
=======================================

What:  /api/habits listing, creation and daily check-in.
How:   Thin handlers over HabitService; all business rules live there.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.habit import HabitCreate, HabitResponse
from app.services.habit_service import habit_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/habits", tags=["Habits"])


@router.get(
    "",
    response_model=ApiResponse[List[HabitResponse]],
    response_model_exclude_none=True,
    responses={401: {"description": "Missing identity token", "model": ErrorResponse}},
    summary="List the caller's habits",
)
async def list_habits(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[HabitResponse]]:
    habits = await habit_service.list_habits(db=db, user_id=user_id)
    return ApiResponse[List[HabitResponse]](data=habits)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[HabitResponse],
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing or empty name", "model": ErrorResponse},
        401: {"description": "Missing identity token", "model": ErrorResponse},
    },
    summary="Create a habit",
)
async def create_habit(
    payload: HabitCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[HabitResponse]:
    habit = await habit_service.create_habit(db=db, user_id=user_id, payload=payload)
    return ApiResponse[HabitResponse](message="Habit created", data=habit)


@router.post(
    "/{habit_id}/checkin",
    response_model=ApiResponse[HabitResponse],
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid id or already checked in today", "model": ErrorResponse},
        401: {"description": "Missing identity token", "model": ErrorResponse},
        404: {"description": "Habit not found", "model": ErrorResponse},
    },
    summary="Check in a habit for today",
)
async def check_in(
    habit_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[HabitResponse]:
    """
    Record today's check-in.

    A second check-in on the same calendar day fails with
    400 duplicate_operation and leaves the habit untouched.
    """
    habit = await habit_service.check_in(db=db, user_id=user_id, habit_id=habit_id)
    return ApiResponse[HabitResponse](message="Checked in", data=habit)
