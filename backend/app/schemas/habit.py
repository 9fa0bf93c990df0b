"""
Daylog Backend — Habit Request/Response Schemas
=================================================
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.common import CAMEL_CONFIG, DisplayDateTime


class HabitCreate(BaseModel):
    name: Optional[str] = Field(default=None, description="Habit name (required)")
    frequency: Optional[str] = Field(default=None, description="daily, weekly_3, custom...")
    target: Optional[str] = Field(default=None, description="Free-text goal description")

    model_config = CAMEL_CONFIG


class HabitResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    frequency: str
    target: str
    current_streak: int
    max_streak: int
    check_ins: List[DisplayDateTime]
    created_at: DisplayDateTime
    updated_at: DisplayDateTime

    model_config = CAMEL_CONFIG
