"""
Daylog Backend — Diary Request/Response Schemas
=================================================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.common import CAMEL_CONFIG, DisplayDateTime


class DiaryUpsert(BaseModel):
    """
    Body of POST /api/diaries.

    `date` may carry any time of day; only its calendar day is used.
    Naive values are read in the display zone. Defaults to now.
    """
    date: Optional[datetime] = Field(default=None, description="Day of the entry (ISO 8601)")
    mood: Optional[str] = Field(default=None, description="Mood icon or code (required)")
    core_event: Optional[str] = Field(default=None, description="Core event of the day")
    reflection: Optional[str] = Field(default=None, description="Reflection summary")

    model_config = CAMEL_CONFIG


class DiaryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    date: DisplayDateTime
    mood: str
    core_event: str
    reflection: str
    created_at: DisplayDateTime
    updated_at: DisplayDateTime

    model_config = CAMEL_CONFIG
