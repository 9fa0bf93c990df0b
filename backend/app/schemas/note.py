"""
Daylog Backend — Note Request/Response Schemas
================================================

What:  API contract for /api/notes.
How:   Every request field is optional at the schema level. NoteService
       enforces "title required and non-empty after trim" and reports it
       as 400 invalid_argument.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.common import CAMEL_CONFIG, DisplayDateTime


class NoteInput(BaseModel):
    """Body of POST, PUT and PATCH /api/notes. Omitted fields are None."""
    title: Optional[str] = Field(default=None, description="Note title (required on POST/PUT)")
    content: Optional[str] = Field(default=None, description="Note body text")
    images: Optional[List[str]] = Field(default=None, description="Ordered image URLs")

    model_config = CAMEL_CONFIG


class NoteResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    images: List[str]
    created_at: DisplayDateTime
    updated_at: DisplayDateTime

    model_config = CAMEL_CONFIG
