"""File store: uploaded image bytes on disk plus metadata rows."""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fileuploader.models.stored_file import StoredFile
from fileuploader.services.errors import (
    FileAccessDeniedError,
    FileTooLargeError,
    StorageError,
    StoredFileNotFoundError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/bmp",
        "image/tiff",
        "image/tif",
        "image/svg+xml",
    }
)

CHUNK_SIZE = 64 * 1024


def is_image_content_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower() in ALLOWED_IMAGE_TYPES


def safe_filename(filename: str | None) -> str:
    """Strip any directory components a client put in the filename."""
    name = Path((filename or "").replace("\\", "/")).name
    return name or "upload"


class FileStore:
    """Saves uploads under upload_dir and serves them back by id."""

    def __init__(self, session: AsyncSession, upload_dir: str, max_upload_size: int = 8 << 20):
        self.session = session
        self.upload_dir = Path(upload_dir)
        self.max_upload_size = max_upload_size

    async def save_upload(
        self,
        owner_id: int,
        filename: str | None,
        content_type: str | None,
        stream: BinaryIO,
        user_agent: str | None = None,
        remote_addr: str | None = None,
    ) -> StoredFile:
        """Write an uploaded image to disk and record its metadata.

        The size limit is enforced while copying into the upload directory,
        so an oversized upload never reaches its destination file in full.
        Each upload gets a fresh path that is created exclusively; an
        existing file is never truncated or removed. The destination file is
        removed if the copy or the metadata insert fails.
        """
        if not is_image_content_type(content_type):
            raise UnsupportedFileTypeError(
                "File must be an image (JPEG, PNG, GIF, WebP, BMP, TIFF, SVG)"
            )

        name = safe_filename(filename)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / (
            f"upload_{owner_id}_{int(time.time())}_{secrets.token_hex(8)}_{name}"
        )

        out = open(path, "xb")
        size = 0
        try:
            with out:
                while chunk := stream.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_upload_size:
                        raise FileTooLargeError(self.max_upload_size)
                    out.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        stored = StoredFile(
            owner_id=owner_id,
            filename=name,
            content_type=content_type,
            size=size,
            file_path=str(path),
            user_agent=user_agent,
            remote_addr=remote_addr,
        )
        self.session.add(stored)
        try:
            await self.session.flush()
            await self.session.refresh(stored)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            path.unlink(missing_ok=True)
            raise StorageError("Failed to save file metadata") from e

        logger.info(f"Stored file {stored.id} ({size} bytes) for account {owner_id}")
        return stored

    async def _load(self, file_id: int) -> StoredFile:
        try:
            result = await self.session.execute(select(StoredFile).where(StoredFile.id == file_id))
            stored = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load file metadata") from e

        if stored is None:
            raise StoredFileNotFoundError("File not found")
        return stored

    @staticmethod
    def _ensure_on_disk(stored: StoredFile) -> StoredFile:
        if not os.path.exists(stored.file_path):
            raise StoredFileNotFoundError("File not found on disk")
        return stored

    async def get(self, file_id: int) -> StoredFile:
        """Return metadata for a file whose bytes are still on disk."""
        return self._ensure_on_disk(await self._load(file_id))

    async def get_owned(self, file_id: int, owner_id: int) -> StoredFile:
        """Like get(), but only for the owning account.

        Ownership is checked before the disk, so other accounts cannot probe
        which files still exist.
        """
        stored = await self._load(file_id)
        if stored.owner_id != owner_id:
            raise FileAccessDeniedError("Access denied")
        return self._ensure_on_disk(stored)
