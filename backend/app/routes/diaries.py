"""
Daylog Backend — Diary Route Handlers
=======================================

What:  /api/diaries listing and per-day upsert.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.diary import DiaryResponse, DiaryUpsert
from app.services.diary_service import diary_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diaries", tags=["Diaries"])


@router.get(
    "",
    response_model=ApiResponse[List[DiaryResponse]],
    response_model_exclude_none=True,
    responses={401: {"description": "Missing identity token", "model": ErrorResponse}},
    summary="List the caller's diary entries",
)
async def list_diaries(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[DiaryResponse]]:
    diaries = await diary_service.list_diaries(db=db, user_id=user_id)
    return ApiResponse[List[DiaryResponse]](data=diaries)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[DiaryResponse],
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing or empty mood", "model": ErrorResponse},
        401: {"description": "Missing identity token", "model": ErrorResponse},
    },
    summary="Create or overwrite the entry for a day",
)
async def upsert_diary(
    payload: DiaryUpsert,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[DiaryResponse]:
    """
    Example request body:
        {"date": "2024-03-02T21:30:00+08:00", "mood": "😊",
         "coreEvent": "Finished the draft", "reflection": "Start earlier"}

    Posting again for the same day replaces mood, coreEvent and reflection.
    """
    diary = await diary_service.upsert_diary(db=db, user_id=user_id, payload=payload)
    return ApiResponse[DiaryResponse](message="Diary saved", data=diary)
