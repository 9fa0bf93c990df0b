"""
Daylog Backend — Notes Route Handlers
=======================================

What:  CRUD endpoints for /api/notes.
How:   Resolve the caller via get_current_user_id, delegate to NoteService,
       wrap the result in the success envelope.

Ids are taken as plain strings so a malformed id reaches NoteService and
becomes a 400 invalid_argument rather than FastAPI's 422.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user_id
from app.schemas.common import ApiResponse, ErrorResponse, PaginatedResponse
from app.schemas.note import NoteInput, NoteResponse
from app.services.note_service import DEFAULT_SORT, note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

ERROR_RESPONSES = {
    400: {"description": "Invalid id or body", "model": ErrorResponse},
    401: {"description": "Missing identity token", "model": ErrorResponse},
    404: {"description": "Note not found", "model": ErrorResponse},
}


@router.get(
    "/notes",
    response_model=PaginatedResponse[NoteResponse],
    response_model_exclude_none=True,
    responses={k: v for k, v in ERROR_RESPONSES.items() if k != 404},
    summary="List notes with pagination and search",
)
async def list_notes(
    response: Response,
    page: int = Query(default=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, description="Items per page"),
    page_size: Optional[int] = Query(
        default=None, alias="pageSize", description="Items per page; overrides limit",
    ),
    search: Optional[str] = Query(
        default=None, description="Case-insensitive substring of title or content",
    ),
    sort: str = Query(
        default=DEFAULT_SORT,
        description="createdAt, updatedAt or title; prefix '-' for descending",
    ),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[NoteResponse]:
    """
    Example client usage:
        GET /api/notes?page=2&pageSize=20&search=travel&sort=-updatedAt
    """
    result = await note_service.list_notes(
        db=db,
        user_id=user_id,
        page=page,
        limit=limit,
        page_size=page_size,
        search=search,
        sort=sort,
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/notes/{note_id}",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NoteResponse]:
    note = await note_service.get_note(db=db, user_id=user_id, note_id=note_id)
    return ApiResponse[NoteResponse](data=note)


@router.post(
    "/notes",
    status_code=201,
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    responses={k: v for k, v in ERROR_RESPONSES.items() if k != 404},
    summary="Create a note",
)
async def create_note(
    payload: NoteInput,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NoteResponse]:
    note = await note_service.create_note(db=db, user_id=user_id, payload=payload)
    return ApiResponse[NoteResponse](message="Note created", data=note)


@router.put(
    "/notes/{note_id}",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Replace a note",
)
async def replace_note(
    note_id: str,
    payload: NoteInput,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NoteResponse]:
    note = await note_service.replace_note(db=db, user_id=user_id, note_id=note_id, payload=payload)
    return ApiResponse[NoteResponse](message="Note updated", data=note)


@router.patch(
    "/notes/{note_id}",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Partially update a note",
)
async def update_note(
    note_id: str,
    payload: NoteInput,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NoteResponse]:
    note = await note_service.update_note(db=db, user_id=user_id, note_id=note_id, payload=payload)
    return ApiResponse[NoteResponse](message="Note updated", data=note)


@router.delete(
    "/notes/{note_id}",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NoteResponse]:
    note = await note_service.delete_note(db=db, user_id=user_id, note_id=note_id)
    return ApiResponse[NoteResponse](message="Note deleted", data=note)
