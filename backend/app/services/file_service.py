"""
Daylog Backend — File Storage Service
=======================================

What:  Image upload validation, storage, public URL building and safe lookup.
How:   Validates extension, size and sniffed MIME type, stores in
       date-organized directories under a generated file name.
Who:   Called by the /api/upload and /uploads route handlers.

Security Model:
    1. Extension check:   jpeg, jpg, png, gif, webp only
    2. MIME type check:   libmagic inspects the header bytes; a renamed
                          non-image is rejected even with an image extension
    3. Size check:        MAX_FILE_SIZE (default 5MB)
    4. UUID filename:     no client input in the stored path
    5. Lookup check:      served paths must resolve inside the storage root

Stored files carry no owner; notes reference them by URL.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}

# URL prefix under which stored files are served
PUBLIC_PREFIX = "/uploads"


class FileService:
    """
    Manages upload validation and the storage directory.

    Directory Structure:
        uploads/
        └── 2024/
            └── 01/
                └── 15/
                    ├── a1b2c3d4-....jpg
                    └── e5f6g7h8-....webp
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                         If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  InvalidArgumentError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidArgumentError(
                message=(
                    "Only image files can be uploaded "
                    f"({', '.join(e.lstrip('.') for e in sorted(ALLOWED_EXTENSIONS))})"
                ),
                field="file",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty uploads and uploads over the configured maximum.

        Content-Length is checked first, then the actual byte count, since
        clients can misreport the header.
        """
        if actual_size == 0:
            raise InvalidArgumentError(message="No file uploaded", field="file")

        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise InvalidArgumentError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise InvalidArgumentError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes) -> str:
        """
        Determine the true content type from magic bytes.

        Returns:
            Detected MIME type string (e.g., "image/webp")

        Raises:
            InvalidArgumentError if the content is not an allowed image type
            FileStorageError if detection itself fails
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise InvalidArgumentError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "The file must be a valid image (JPEG, PNG, GIF or WebP)."
                ),
                field="file",
                context={"detected_mime": mime_type},
            )

        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Creates a YYYY/MM/DD/<uuid><ext> path.

        Returns: Tuple of (absolute_path, relative_path_from_storage_root).
        """
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{date_dir}/{unique_name}"
        absolute_path = self.storage_root / relative_path

        return absolute_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, relative_path).
        Raises:  FileStorageError if directory creation or file write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            # A failed write can leave a truncated file behind
            await self.cleanup_file(str(absolute_path))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file, best effort.

        Missing files are ignored and other failures are logged, not raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete validation and storage pipeline, cheapest check first.

        Returns: Tuple of (absolute_path, relative_path).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)
        return await self.store_file(content, ext)

    def public_url(self, relative_path: str, base_url: str) -> str:
        """
        Absolute URL under which a stored file is served.

        PUBLIC_BASE_URL wins over the request's base URL when configured.
        """
        base = (settings.public_base_url or base_url).rstrip("/")
        return f"{base}{PUBLIC_PREFIX}/{relative_path}"

    def resolve_stored_path(self, relative_path: str) -> Path:
        """
        Map a served path back to a file inside the storage root.

        Raises:
            InvalidArgumentError: the path escapes the storage root
            NotFoundError: no such file
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise InvalidArgumentError(message="Invalid file path", field="path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
