"""
Daylog Backend — Shared Schemas
=================================

What:  Pieces every resource schema builds on: the camelCase model config,
       the display-time serializer, the success envelope, and the error,
       health and upload bodies.

Time rendering:
    DisplayDateTime is the single output boundary for timestamps. Any field
    typed with it is serialized as "YYYY-MM-DD HH:mm:ss" in the display zone
    (see app.utils.timefmt), whatever the server's locale.
"""

from datetime import datetime
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from app.utils.timefmt import format_display_time

DataT = TypeVar("DataT")

DisplayDateTime = Annotated[
    datetime,
    PlainSerializer(format_display_time, return_type=str, when_used="json"),
]

# Wire format is camelCase (coreEvent, checkIns); snake_case is accepted on input
CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Success envelope returned by every resource endpoint.

    `code` is 200 for every success; the HTTP status distinguishes 200/201.
    """
    code: int = Field(default=200, description="Application status code")
    message: Optional[str] = Field(default=None, description="Human-readable outcome")
    data: DataT


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PaginatedResponse(BaseModel, Generic[DataT]):
    """List envelope with total count and page metadata."""
    code: int = Field(default=200, description="Application status code")
    data: List[DataT]
    total: int = Field(description="Total number of items matching filters")
    pagination: Pagination


class UploadResponse(BaseModel):
    code: int = 200
    message: str = "Image uploaded successfully"
    url: str = Field(description="Absolute URL of the stored image")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "code": 404,
            "error": "not_found",
            "message": "note with ID '...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    code: int = Field(description="HTTP-equivalent numeric code")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    suggestion: Optional[str] = Field(default=None, description="How the client can fix it")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
