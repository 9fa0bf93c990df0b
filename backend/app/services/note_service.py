"""
Daylog Backend — Note Service
===============================

What:  Business rules and persistence for notes.
How:   Every statement filters on the owning user id. Services receive the
       request's session and the caller's user id explicitly.
Who:   Called by the /api/notes route handlers.

Ownership rule:
    A note that exists but belongs to someone else is reported exactly like
    a missing note (NotFoundError → 404). The lookup never distinguishes the
    two cases, so neither can the caller.

Error Handling Strategy:
    Application errors (InvalidArgumentError, NotFoundError) propagate as-is.
    Anything else raised while talking to the database is logged with context
    and wrapped in DatabaseError (generic 500 for the client).
"""

import logging
import math
import uuid
from typing import List, Optional

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError, InvalidArgumentError, NotFoundError
from app.models.note import Note
from app.schemas.common import PaginatedResponse, Pagination
from app.schemas.note import NoteInput, NoteResponse
from app.utils.ids import parse_resource_id
from app.utils.timefmt import utcnow

logger = logging.getLogger(__name__)

# Public sort keys (wire names and snake_case) → columns
SORT_FIELDS = {
    "createdAt": Note.created_at,
    "created_at": Note.created_at,
    "updatedAt": Note.updated_at,
    "updated_at": Note.updated_at,
    "title": Note.title,
}
DEFAULT_SORT = "-createdAt"


def parse_sort(sort: Optional[str]):
    """
    Parse a sort expression: a field name, optionally prefixed with '-' for
    descending order. Returns an ORDER BY clause.

    Examples: "-createdAt" (newest first), "title" (A to Z).
    """
    expr = (sort or DEFAULT_SORT).strip()
    descending = expr.startswith("-")
    field = expr.removeprefix("-")
    column = SORT_FIELDS.get(field)
    if column is None:
        raise InvalidArgumentError(
            message=(
                f"Invalid sort field '{field}'. "
                "Use createdAt, updatedAt or title, optionally prefixed with '-'"
            ),
            field="sort",
        )
    return desc(column) if descending else asc(column)


def require_title(title: Optional[str]) -> str:
    """Return the trimmed title, rejecting missing or whitespace-only titles."""
    if title is None or not title.strip():
        raise InvalidArgumentError(message="Title must not be empty", field="title")
    return title.strip()


def _to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        user_id=note.user_id,
        title=note.title,
        content=note.content,
        images=list(note.images or []),
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - list_notes(): paginated, searchable, sortable listing
        - get_note() / create_note() / delete_note()
        - replace_note(): PUT semantics, omitted fields reset to defaults
        - update_note(): PATCH semantics, omitted fields untouched
    """

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        page: int = 1,
        limit: Optional[int] = None,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = DEFAULT_SORT,
    ) -> PaginatedResponse[NoteResponse]:
        """
        List the caller's notes.

        Paging:
            page_size = page_size or limit or the configured default;
            offset-based (page − 1) × page_size, capped at notes_max_page_size.

        Search:
            Case-insensitive substring match on title OR content. The text is
            matched literally (% and _ are escaped).
        """
        size = page_size or limit or settings.notes_default_page_size
        if page < 1:
            raise InvalidArgumentError(message="page must be at least 1", field="page")
        if size < 1:
            raise InvalidArgumentError(message="limit must be at least 1", field="limit")
        size = min(size, settings.notes_max_page_size)
        order_by = parse_sort(sort)

        filters = [Note.user_id == user_id]
        if search:
            filters.append(
                or_(
                    Note.title.icontains(search, autoescape=True),
                    Note.content.icontains(search, autoescape=True),
                )
            )

        try:
            query = (
                select(Note)
                .where(*filters)
                .order_by(order_by, asc(Note.id))
                .offset((page - 1) * size)
                .limit(size)
            )
            result = await db.execute(query)
            notes: List[Note] = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Note.id)).where(*filters))
            total = count_result.scalar() or 0

        except Exception as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return PaginatedResponse[NoteResponse](
            data=[_to_response(note) for note in notes],
            total=total,
            pagination=Pagination(
                page=page,
                limit=size,
                total=total,
                pages=math.ceil(total / size),
            ),
        )

    async def get_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: str) -> NoteResponse:
        note = await self._get_owned(db, user_id, note_id)
        return _to_response(note)

    async def create_note(
        self, db: AsyncSession, user_id: uuid.UUID, payload: NoteInput
    ) -> NoteResponse:
        """Create a note; title required, content defaults to "", images to []."""
        title = require_title(payload.title)
        now = utcnow()
        note = Note(
            id=uuid.uuid4(),
            user_id=user_id,
            title=title,
            content=payload.content or "",
            images=list(payload.images or []),
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(note)
            await db.flush()
        except Exception as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Note %s created", note.id)
        return _to_response(note)

    async def replace_note(
        self, db: AsyncSession, user_id: uuid.UUID, note_id: str, payload: NoteInput
    ) -> NoteResponse:
        """Full update (PUT): omitted content becomes "", omitted images []."""
        title = require_title(payload.title)
        note = await self._get_owned(db, user_id, note_id)

        note.title = title
        note.content = payload.content or ""
        note.images = list(payload.images or [])
        return await self._save(db, note)

    async def update_note(
        self, db: AsyncSession, user_id: uuid.UUID, note_id: str, payload: NoteInput
    ) -> NoteResponse:
        """Partial update (PATCH): only supplied fields change."""
        title = require_title(payload.title) if payload.title is not None else None
        note = await self._get_owned(db, user_id, note_id)

        if title is not None:
            note.title = title
        if payload.content is not None:
            note.content = payload.content
        if payload.images is not None:
            note.images = list(payload.images)
        return await self._save(db, note)

    async def delete_note(
        self, db: AsyncSession, user_id: uuid.UUID, note_id: str
    ) -> NoteResponse:
        """Delete the note and return its last state."""
        note = await self._get_owned(db, user_id, note_id)
        deleted = _to_response(note)
        try:
            await db.delete(note)
            await db.flush()
        except Exception as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id},
            )

        logger.info("Note %s deleted", note.id)
        return deleted

    async def _save(self, db: AsyncSession, note: Note) -> NoteResponse:
        note.updated_at = utcnow()
        try:
            await db.flush()
        except Exception as e:
            logger.error("Database error updating note %s: %s", note.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": str(note.id)},
            )
        return _to_response(note)

    async def _get_owned(self, db: AsyncSession, user_id: uuid.UUID, note_id: str) -> Note:
        """
        Fetch a note by id AND owner.

        Raises:
            InvalidArgumentError: note_id is not a UUID (→ 400)
            NotFoundError: absent or owned by another user (→ 404)
        """
        parsed_id = parse_resource_id(note_id, "note")
        try:
            result = await db.execute(
                select(Note).where(Note.id == parsed_id, Note.user_id == user_id)
            )
            note = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
