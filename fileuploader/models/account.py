"""Account model for authentication."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from fileuploader.models.base import BaseModel


class Account(BaseModel):
    """A registered user.

    Stores the username and an Argon2 hash of the password. Usernames are
    case-sensitive and unique; neither column changes after creation.
    """

    __tablename__ = "accounts"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.username}>"
