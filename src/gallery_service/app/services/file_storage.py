import asyncio
import random
import shutil
import time
import uuid
from pathlib import Path

import aiofiles
from loguru import logger
from PIL import Image

from ..core.config import Settings, get_settings
from ..core.exceptions import ValidationError
from .domain import StoredUpload

UPLOADS_URL_PREFIX = "/uploads"


class FileStorageService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        directories = [
            Path(self.settings.absolute_uploads_dir),
            Path(self.settings.absolute_temp_dir),
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def validate_upload(self, content_type: str | None, file_size: int) -> None:
        """Reject payloads before anything touches the disk."""
        if content_type not in self.settings.ALLOWED_MIME_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
            )

        if file_size == 0:
            raise ValidationError("Empty file provided")

        if file_size > self.settings.MAX_FILE_SIZE:
            raise ValidationError(
                f"File too large. Maximum size is "
                f"{self.settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
            )

    async def _extract_metadata(self, file_path: str) -> dict:
        try:

            def _extract_format_and_metadata():
                with Image.open(file_path) as img:
                    image_format = img.format.lower() if img.format else None

                    self._validate_format(image_format)

                    return {
                        "width": img.width,
                        "height": img.height,
                        "format": img.format,
                        "file_size": Path(file_path).stat().st_size,
                    }

            return await asyncio.to_thread(_extract_format_and_metadata)

        except ValidationError:
            raise
        except Exception as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

    def _validate_format(self, image_format: str | None) -> None:
        if not image_format:
            raise ValidationError("Unable to determine image format")

        if image_format not in self.settings.ALLOWED_IMAGE_FORMATS:
            raise ValidationError(f"Unsupported image format: {image_format}")

    def generate_stored_filename(self, original_filename: str) -> str:
        """Build ``<epoch-ms>-<0..9999>-<original name>`` for the uploads directory."""
        safe_name = Path(original_filename).name.replace(" ", "_") or "image"
        timestamp = int(time.time() * 1000)
        return f"{timestamp}-{random.randint(0, 9999)}-{safe_name}"

    def public_path(self, filename: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{filename}"

    def storage_path(self, filename: str) -> Path:
        return Path(self.settings.absolute_uploads_dir) / filename

    async def save_upload(
        self, file_data: bytes, original_filename: str, content_type: str | None
    ) -> StoredUpload:
        self.validate_upload(content_type, len(file_data))

        temp_path = f"{self.settings.absolute_temp_dir}/{uuid.uuid4().hex}_temp"

        logger.info(f"Saving upload: {original_filename} ({len(file_data)} bytes)")

        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(file_data)

            metadata = await self._extract_metadata(temp_path)

            filename = self.generate_stored_filename(original_filename)
            while self.storage_path(filename).exists():
                filename = self.generate_stored_filename(original_filename)

            destination = self.storage_path(filename)
            await asyncio.to_thread(shutil.move, temp_path, str(destination))

            return StoredUpload(
                filename=filename,
                original_filename=original_filename,
                filepath=self.public_path(filename),
                mime_type=content_type,
                file_size=metadata["file_size"],
                metadata=metadata,
            )

        except Exception as e:
            await self._safe_delete_file(temp_path)

            if isinstance(e, ValidationError):
                raise
            raise IOError(f"Failed to save upload: {str(e)}")

    async def delete_upload(self, filename: str) -> bool:
        deleted = await self._safe_delete_file(str(self.storage_path(filename)))
        if deleted:
            logger.info(f"Removed stored file {filename}")
        return deleted

    async def _safe_delete_file(self, file_path: str) -> bool:
        try:
            path = Path(file_path)
            if path.exists():
                await asyncio.to_thread(path.unlink)
                return True
            return False
        except OSError as e:
            logger.error(f"Error deleting file {file_path}: {e}")
            return False

    async def file_exists(self, filename: str) -> bool:
        return self.storage_path(filename).exists()
