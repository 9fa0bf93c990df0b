"""
Daylog Backend — Upload Route Handlers
========================================

What:  POST /api/upload stores one image; GET /uploads/{path} serves it back.
How:   FileService validates (extension → size → sniffed MIME) and writes the
       file; the response carries the absolute URL notes should reference.

Request Flow (upload):
    1. Client sends multipart/form-data with a 'file' field and the identity header
    2. Content is read into memory (bounded by the size check)
    3. FileService validates and stores under YYYY/MM/DD/<uuid><ext>
    4. Response: {code: 200, message, url}

Serving needs no identity token; stored files carry no owner.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse

from app.dependencies import get_current_user_id
from app.exceptions import InvalidArgumentError
from app.schemas.common import ErrorResponse, UploadResponse
from app.services.file_service import PUBLIC_PREFIX, file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post(
    "/api/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "Missing, oversized or non-image file", "model": ErrorResponse},
        401: {"description": "Missing identity token", "model": ErrorResponse},
        500: {"description": "File could not be written", "model": ErrorResponse},
    },
    summary="Upload a single image",
    description=(
        "Upload one image (JPEG, PNG, GIF or WebP, max 5MB by default) as the "
        "multipart field 'file'. Returns the absolute URL of the stored image."
    ),
)
async def upload_image(
    request: Request,
    file: Optional[UploadFile] = File(default=None, description="Image file"),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> UploadResponse:
    if file is None:
        raise InvalidArgumentError(message="No file uploaded", field="file")

    try:
        content = await file.read()
        logger.info(
            "Received upload: filename=%s, size=%d bytes",
            file.filename or "unknown",
            len(content),
        )
        _, relative_path = await file_service.validate_and_store(
            filename=file.filename or "",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()

    return UploadResponse(
        url=file_service.public_url(relative_path, str(request.base_url)),
    )


@router.get(
    PUBLIC_PREFIX + "/{file_path:path}",
    response_class=FileResponse,
    responses={404: {"description": "No such file", "model": ErrorResponse}},
    summary="Serve an uploaded image",
)
async def serve_upload(file_path: str) -> FileResponse:
    return FileResponse(file_service.resolve_stored_path(file_path))
