"""
Inkwell Backend: File Service Unit Tests
==========================================

What:  Tests for cover upload storage (size checks, naming, writes, cleanup).
How:   Real writes into a per-test temporary directory; aiofiles is patched
       only to simulate a failing disk.

Test Strategy:
    ✅ Extension taken from the last dot segment, dropped when absent or odd
    ✅ Only image extensions and image signatures (libmagic) are stored
    ✅ Size limits (empty, boundary, reported and actual size)
    ✅ Stored names are random and never reuse the client's filename
    ✅ Write failures surface as FileStorageError
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import magic
import pytest

from inkwell.exceptions import FileStorageError, ValidationError
from inkwell.services.file_service import FileService, extension_for

MAX_SIZE = 1024


class TestExtension:

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.jpg", "jpg"),
            ("photo.PNG", "PNG"),
            ("holiday.photo.jpeg", "jpeg"),
            ("archive.tar.gz", "gz"),
        ],
    )
    def test_last_segment(self, filename, expected):
        assert extension_for(filename) == expected

    def test_no_dot(self):
        assert extension_for("README") == ""

    def test_trailing_dot(self):
        assert extension_for("photo.") == ""

    def test_path_like_segment_dropped(self):
        assert extension_for("evil./../x") == ""


class TestFileValidation:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(temp_storage, MAX_SIZE)

    def test_validate_size_within_limit(self):
        self.service.validate_size(None, 100)

    def test_validate_size_at_limit(self):
        """Files exactly at the limit should pass."""
        self.service.validate_size(MAX_SIZE, MAX_SIZE)

    def test_validate_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, MAX_SIZE + 1)

    def test_validate_reported_size_over_limit(self):
        """A client-reported size above the limit is rejected up front."""
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(MAX_SIZE * 4, 10)

    def test_validate_size_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)


class TestStoreUpload:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.root = Path(temp_storage)
        self.service = FileService(temp_storage, MAX_SIZE)

    @pytest.mark.asyncio
    async def test_store_writes_bytes(self, sample_image_bytes):
        stored = await self.service.store_upload("cover.png", sample_image_bytes)

        assert stored.original_name == "cover.png"
        assert stored.path.startswith("uploads/")
        assert stored.path.endswith(".png")
        assert Path(stored.absolute_path).read_bytes() == sample_image_bytes
        assert Path(stored.absolute_path).parent == self.root.resolve()

    @pytest.mark.asyncio
    async def test_client_filename_not_reused(self, sample_image_bytes):
        stored = await self.service.store_upload("cover.png", sample_image_bytes)
        assert "cover" not in stored.path

    @pytest.mark.asyncio
    async def test_same_filename_gets_distinct_paths(self, sample_image_bytes):
        first = await self.service.store_upload("a.png", sample_image_bytes)
        second = await self.service.store_upload("a.png", sample_image_bytes)

        assert first.path != second.path
        assert len(list(self.root.iterdir())) == 2

    @pytest.mark.asyncio
    async def test_no_extension_rejected(self, sample_image_bytes):
        with pytest.raises(ValidationError, match="not supported"):
            await self.service.store_upload("cover", sample_image_bytes)
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_html_cover_rejected(self, sample_html_bytes):
        with pytest.raises(ValidationError, match="not supported"):
            await self.service.store_upload("x.html", sample_html_bytes)
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_html_renamed_to_png_rejected(self, sample_html_bytes):
        """The file signature decides, not the name."""
        with pytest.raises(ValidationError, match="content type"):
            await self.service.store_upload("x.png", sample_html_bytes)
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_jpeg_accepted(self, sample_jpeg_bytes):
        stored = await self.service.store_upload("photo.JPG", sample_jpeg_bytes)
        assert stored.path.endswith(".JPG")

    @pytest.mark.asyncio
    async def test_type_detection_failure(self, sample_image_bytes):
        with patch("magic.from_buffer", side_effect=magic.MagicException("libmagic error")):
            with pytest.raises(FileStorageError):
                await self.service.store_upload("cover.png", sample_image_bytes)

    @pytest.mark.asyncio
    async def test_empty_upload_rejected(self):
        with pytest.raises(ValidationError):
            await self.service.store_upload("cover.png", b"")
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_oversized_upload_rejected(self):
        with pytest.raises(ValidationError):
            await self.service.store_upload("cover.png", b"x" * (MAX_SIZE + 1))
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure(self, sample_image_bytes):
        with patch("aiofiles.open", new_callable=MagicMock) as mock_open:
            mock_open.side_effect = OSError("disk full")

            with pytest.raises(FileStorageError):
                await self.service.store_upload("cover.png", sample_image_bytes)

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cleanup_file_removes_file(self, sample_image_bytes):
        stored = await self.service.store_upload("cover.png", sample_image_bytes)
        assert Path(stored.absolute_path).exists()

        await self.service.cleanup_file(stored.absolute_path)
        assert not Path(stored.absolute_path).exists()

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self):
        """cleanup_file should not raise for non-existent files."""
        await self.service.cleanup_file(str(self.root / "nonexistent.jpg"))


class TestAllowedTypes:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(temp_storage, MAX_SIZE)

    @pytest.mark.parametrize("filename", ["a.png", "a.PNG", "a.jpg", "a.jpeg", "a.gif", "a.webp"])
    def test_image_extensions_allowed(self, filename):
        assert self.service.validate_extension(filename) == filename.rsplit(".", 1)[1]

    @pytest.mark.parametrize("filename", ["x.html", "x.htm", "x.svg", "x.js", "x.exe", "README"])
    def test_other_extensions_rejected(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    def test_png_signature(self, sample_image_bytes):
        assert self.service.validate_content_type(sample_image_bytes) == "image/png"

    def test_jpeg_signature(self, sample_jpeg_bytes):
        assert self.service.validate_content_type(sample_jpeg_bytes) == "image/jpeg"

    def test_html_signature_rejected(self, sample_html_bytes):
        with pytest.raises(ValidationError, match="content type"):
            self.service.validate_content_type(sample_html_bytes)
