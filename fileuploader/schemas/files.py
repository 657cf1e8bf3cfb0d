"""Pydantic schemas for file upload API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FileMetadataResponse(BaseModel):
    """Stored file metadata. The on-disk path is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    filename: str
    content_type: str
    size: int
    user_agent: str | None
    remote_addr: str | None
    created_at: datetime


class UploadResponse(BaseModel):
    """Response after a successful upload."""

    message: str
    file_id: int
    metadata: FileMetadataResponse
