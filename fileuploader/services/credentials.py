"""Credential store: account persistence and password verification."""

import logging
import secrets
from typing import Protocol

import argon2
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fileuploader.core.config import Settings
from fileuploader.models.account import Account
from fileuploader.services.errors import (
    AccountNotFoundError,
    DuplicateUsernameError,
    InvalidAccountInputError,
    InvalidCredentialsError,
    StorageError,
)

logger = logging.getLogger(__name__)


class PasswordHasher(Protocol):
    """One-way password hashing capability.

    ``dummy_hash`` is a valid hash of a random password, verified against
    when an account does not exist.
    """

    dummy_hash: str

    def hash(self, password: str) -> str: ...

    def verify(self, password_hash: str, candidate: str) -> bool: ...


class Argon2PasswordHasher:
    """Argon2id hashing with a random per-call salt embedded in the output."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ph = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
        )
        self.dummy_hash = self._ph.hash(secrets.token_urlsafe(16))

    @classmethod
    def from_settings(cls, config: Settings) -> "Argon2PasswordHasher":
        return cls(
            time_cost=config.password_hash_time_cost,
            memory_cost=config.password_hash_memory_cost,
            parallelism=config.password_hash_parallelism,
        )

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, password_hash: str, candidate: str) -> bool:
        """Verify a password against its hash using constant-time comparison."""
        try:
            return self._ph.verify(password_hash, candidate)
        except (VerificationError, InvalidHashError):
            return False


class CredentialStore:
    """Creates, looks up and verifies accounts.

    The database's unique constraint on username is the source of truth for
    uniqueness; no lookup-then-insert race is possible.
    """

    def __init__(
        self,
        session: AsyncSession,
        hasher: PasswordHasher,
        password_min_length: int = 6,
    ):
        self.session = session
        self.hasher = hasher
        self.password_min_length = password_min_length

    def _check_policy(self, username: str, password: str) -> None:
        if not username or not password:
            raise InvalidAccountInputError("Username and password are required")
        if len(password) < self.password_min_length:
            raise InvalidAccountInputError(
                f"Password must be at least {self.password_min_length} characters long"
            )

    async def create_account(self, username: str, password: str) -> Account:
        """Create a new account.

        The insert and the read-back of server-assigned columns run in one
        transaction, so the caller never sees a half-created account.

        Raises:
            InvalidAccountInputError: Empty username/password or password too short.
            DuplicateUsernameError: Username already taken.
            StorageError: Any other database failure.
        """
        self._check_policy(username, password)

        account = Account(username=username, password_hash=self.hasher.hash(password))
        self.session.add(account)
        try:
            await self.session.flush()
            await self.session.refresh(account)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateUsernameError(f"Username already exists: {username}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create account {username}: {e}")
            raise StorageError("Failed to create account") from e

        logger.info(f"Created account: {username} (id={account.id})")
        return account

    async def _find_one(self, *criteria) -> Account:
        try:
            result = await self.session.execute(select(Account).where(*criteria))
            account = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load account") from e
        if account is None:
            raise AccountNotFoundError("Account not found")
        return account

    async def find_by_username(self, username: str) -> Account:
        return await self._find_one(Account.username == username)

    async def find_by_id(self, account_id: int) -> Account:
        return await self._find_one(Account.id == account_id)

    def verify_password(self, account: Account, candidate: str) -> bool:
        return self.hasher.verify(account.password_hash, candidate)

    async def authenticate(self, username: str, password: str) -> Account:
        """Return the account for a username/password pair.

        Raises InvalidCredentialsError for both "user not found" and
        "wrong password" to prevent user enumeration.
        """
        try:
            account = await self.find_by_username(username)
        except AccountNotFoundError:
            # Exactly one verify, as for an existing account
            self.hasher.verify(self.hasher.dummy_hash, password)
            raise InvalidCredentialsError("Invalid username or password") from None

        if not self.verify_password(account, password):
            raise InvalidCredentialsError("Invalid username or password")

        return account
