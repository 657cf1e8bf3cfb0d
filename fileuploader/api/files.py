"""File upload and retrieval endpoints."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fileuploader.api.auth import get_current_identity
from fileuploader.core import get_db
from fileuploader.core.request_utils import get_client_ip
from fileuploader.models.stored_file import StoredFile
from fileuploader.schemas.files import FileMetadataResponse, UploadResponse
from fileuploader.services.errors import (
    FileAccessDeniedError,
    FileTooLargeError,
    StorageError,
    StoredFileNotFoundError,
    UnsupportedFileTypeError,
)
from fileuploader.services.files import FileStore
from fileuploader.services.gate import Identity

logger = logging.getLogger(__name__)

# Mounted under /api/v1
upload_router = APIRouter(tags=["files"])

# Mounted at the root
router = APIRouter(tags=["files"])


def get_file_store(request: Request, db: AsyncSession = Depends(get_db)) -> FileStore:
    """Dependency to get a file store bound to this request's session."""
    config = request.app.state.settings
    return FileStore(db, config.upload_dir, max_upload_size=config.max_upload_size)


def _file_response(stored: StoredFile) -> FileResponse:
    return FileResponse(
        stored.file_path,
        media_type=stored.content_type,
        filename=stored.filename,
        content_disposition_type="inline",
    )


async def _load(coro) -> StoredFile:
    try:
        return await coro
    except StoredFileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except FileAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error",
        ) from e


@upload_router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    request: Request,
    data: UploadFile | None = File(None),
    identity: Identity = Depends(get_current_identity),
    files: FileStore = Depends(get_file_store),
) -> UploadResponse:
    """Upload an image in the multipart field ``data``."""
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file provided or invalid file field name",
        )

    try:
        stored = await files.save_upload(
            owner_id=identity.subject_id,
            filename=data.filename,
            content_type=data.content_type,
            stream=data.file,
            user_agent=request.headers.get("User-Agent"),
            remote_addr=get_client_ip(request),
        )
    except (UnsupportedFileTypeError, FileTooLargeError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save file metadata",
        ) from e
    except OSError as e:
        logger.error(f"Failed to write upload for account {identity.subject_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save file",
        ) from e
    finally:
        await data.close()

    return UploadResponse(
        message="File uploaded successfully",
        file_id=stored.id,
        metadata=FileMetadataResponse.model_validate(stored),
    )


@router.get("/files/{file_id}")
async def serve_file(
    file_id: int,
    identity: Identity = Depends(get_current_identity),
    files: FileStore = Depends(get_file_store),
) -> FileResponse:
    """Serve a file to its owner."""
    stored = await _load(files.get_owned(file_id, identity.subject_id))
    return _file_response(stored)


@router.get("/public/files/{file_id}")
async def serve_public_file(
    file_id: int,
    files: FileStore = Depends(get_file_store),
) -> FileResponse:
    """Serve a file without authentication."""
    stored = await _load(files.get(file_id))
    return _file_response(stored)
