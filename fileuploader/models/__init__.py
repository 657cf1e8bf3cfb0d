# File Uploader Models
from fileuploader.models.account import Account
from fileuploader.models.base import BaseModel
from fileuploader.models.stored_file import StoredFile

__all__ = [
    "Account",
    "BaseModel",
    "StoredFile",
]
