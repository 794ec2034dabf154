"""
Inkwell Backend: Cover Upload Service
=======================================

What:  Receives cover images attached to posts and writes them to the upload
       directory that is served at /uploads.
How:   Validates extension, size and content type, then writes the bytes
       under a random name with aiofiles.
Who:   Called by PostService when a create or update carries a file.
When:  After authentication and ownership checks, before the row is flushed.

Upload checks (in order):
    1. Extension:  last dot-separated segment must be an image extension
    2. Size:       non-empty and within max_file_size
    3. Content:    python-magic reads the file signature; only image types
                   in ALLOWED_MIME_TYPES pass

    Covers are served from the API's own origin, so anything a browser would
    run (HTML, SVG) must never be stored.

Naming:
    Stored name = <uuid4 hex>.<ext>, where <ext> is the last dot-separated
    segment of the original filename. The random part keeps names unique
    under concurrent uploads and keeps client input out of the path; the
    extension is kept so the static file server can guess the content type.

    "holiday.photo.JPG" → "3f9c...e1.JPG"
    "README"            → rejected (no extension)
    "page.html"         → rejected (not an image extension)
"""

import logging
import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import magic

from inkwell.exceptions import ValidationError, FileStorageError

logger = logging.getLogger(__name__)

# Public URL prefix under which the upload directory is mounted
PUBLIC_PREFIX = "uploads"

_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,16}$")

# ── Allowed File Types ────────────────────────────────────────────────────
# Raster images only; SVG is excluded because it can carry script
ALLOWED_MIME_TYPES = {
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
}

# Compared case-insensitively, without the dot
ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

# libmagic only needs the header bytes
_SNIFF_BYTES = 2048


@dataclass(frozen=True)
class StoredUpload:
    """Metadata returned for a stored cover file."""
    original_name: str
    path: str           # public path, e.g. "uploads/<name>.png"
    absolute_path: str  # location on disk


def extension_for(filename: str) -> str:
    """
    Extension of `filename`: its last dot-separated segment.

    Returns an empty string when the name has no dot or the segment contains
    anything other than letters and digits.
    """
    if "." not in filename:
        return ""
    ext = filename.rsplit(".", 1)[1]
    if not _EXTENSION_RE.match(ext):
        return ""
    return ext


class FileService:
    """
    Stores uploaded cover files in a flat directory.

    Directory Structure:
        uploads/
        ├── 0b6f2d3c9a8e4f1b9d7a2c5e8f0a1b2c.jpg
        └── 7e1d0c9b8a7f4e6d5c4b3a2918f7e6d5.png

    Replacing or deleting a post never removes its previous cover file.
    """

    def __init__(self, upload_dir: str, max_file_size: int):
        """
        Args:
            upload_dir: Directory receiving uploads (created if missing).
            max_file_size: Largest accepted upload, in bytes.
        """
        self.upload_root = Path(upload_dir).resolve()
        self.max_file_size = max_file_size
        self.upload_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_root=%s", self.upload_root)

    def validate_extension(self, filename: str) -> str:
        """
        Check the filename's extension against ALLOWED_EXTENSIONS.

        Returns: the extension as sent by the client (case preserved).
        Raises:  ValidationError for a missing or non-image extension.
        """
        ext = extension_for(filename)
        if ext.lower() not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content: bytes) -> str:
        """
        Detect the real content type from the file signature.

        A renamed file (HTML saved as .png) is caught here, since libmagic
        ignores the name and reads the header bytes.

        Raises:
            ValidationError: detected type is not an allowed image type.
            FileStorageError: libmagic failed.
        """
        try:
            mime_type = magic.from_buffer(content[:_SNIFF_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("Content type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"File content type '{mime_type}' is not supported. Please upload an image.",
                field="file",
                context={"detected": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against the configured maximum.

        Args:
            content_length: Size reported by the client (may be None or inaccurate)
            actual_size: Actual byte count of the uploaded file

        Raises:
            ValidationError for empty or oversized files
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="Uploaded file is empty.",
                field="file",
            )

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _generate_storage_name(self, extension: str) -> str:
        name = uuid.uuid4().hex
        if extension:
            name = f"{name}.{extension}"
        return name

    async def store_upload(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> StoredUpload:
        """
        Validate and write an uploaded file.

        Returns:
            StoredUpload with the original name and the public path to save
            on the post.

        Raises:
            ValidationError: not an image, empty, or oversized.
            FileStorageError: type detection or the write failed.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_content_type(content)

        name = self._generate_storage_name(ext)
        absolute_path = self.upload_root / name

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

        logger.info("Stored upload %s as %s (%d bytes)", filename, name, len(content))
        return StoredUpload(
            original_name=filename,
            path=f"{PUBLIC_PREFIX}/{name}",
            absolute_path=str(absolute_path),
        )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file that no row references.

        When:    A post insert/update failed after its cover was written.
        Failure to delete is logged and not raised: the request is already
        failing with the original error.
        """
        path = Path(file_path)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))
