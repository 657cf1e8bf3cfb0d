"""Uploaded file metadata."""

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fileuploader.models.base import BaseModel


class StoredFile(BaseModel):
    """Metadata for one uploaded file; the bytes live at file_path."""

    __tablename__ = "files"

    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, index=True
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)

    # Request provenance
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    remote_addr: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<StoredFile {self.id} {self.filename}>"
