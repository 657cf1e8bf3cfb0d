"""Session token codec: signed, time-bound bearer tokens.

Tokens are HS256 JWTs carrying the account id (``sub``), the username,
``iat``, ``exp`` and a random ``jti``. They are stateless; revocation is
handled separately by the revocation registry.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAlgorithmError,
    InvalidSignatureError,
    PyJWTError,
)

from fileuploader.core.config import Settings
from fileuploader.services.errors import (
    BadSignatureError,
    MalformedTokenError,
    TokenExpiredError,
    UnsupportedAlgorithmError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SessionClaims:
    """Identity and validity window carried by a session token."""

    subject_id: int
    subject_username: str
    issued_at: datetime
    expires_at: datetime


class TokenSigner(Protocol):
    """Symmetric signing capability."""

    def sign(self, claims: dict[str, Any]) -> str: ...

    def verify(self, token: str) -> dict[str, Any]: ...


class JWTSigner:
    """PyJWT-backed signer pinned to a single HMAC algorithm."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self.algorithm = algorithm

    def sign(self, claims: dict[str, Any]) -> str:
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify the signature and registered claims, returning the payload.

        The header algorithm is checked before anything else so a token
        signed with ``none`` or another HMAC width never reaches signature
        verification.
        """
        try:
            header = jwt.get_unverified_header(token)
        except DecodeError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e

        alg = header.get("alg")
        if alg != self.algorithm:
            raise UnsupportedAlgorithmError(f"Unsupported signing algorithm: {alg}")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except InvalidSignatureError as e:
            raise BadSignatureError("Token signature is invalid") from e
        except InvalidAlgorithmError as e:
            raise UnsupportedAlgorithmError(str(e)) from e
        except PyJWTError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e


class SessionTokenCodec:
    """Issues and validates session tokens."""

    def __init__(
        self,
        signer: TokenSigner,
        lifetime: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
    ):
        self.signer = signer
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, config: Settings) -> "SessionTokenCodec":
        signer = JWTSigner(config.effective_jwt_secret_key, config.jwt_algorithm)
        return cls(signer, lifetime=config.session_lifetime)

    def issue(self, subject_id: int, subject_username: str) -> str:
        now = self._clock()
        claims = {
            "sub": str(subject_id),
            "username": subject_username,
            "iat": now,
            "exp": now + self.lifetime,
            # Unique per issue, even within the same second
            "jti": secrets.token_hex(16),
        }
        return self.signer.sign(claims)

    def validate(self, token: str) -> SessionClaims:
        """Validate a token and return its claims.

        Raises:
            MalformedTokenError: Not a token, or required claims missing/invalid.
            BadSignatureError: Signature does not match the secret.
            TokenExpiredError: Token is past exp.
            UnsupportedAlgorithmError: Header names a different algorithm.
        """
        payload = self.signer.verify(token)

        try:
            subject_id = int(payload["sub"])
            username = payload["username"]
            issued_at = datetime.fromtimestamp(payload["iat"], tz=UTC)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=UTC)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedTokenError(f"Invalid token claims: {e}") from e
        if not isinstance(username, str) or not username:
            raise MalformedTokenError("Invalid token claims: username")

        # Checked here as well as in the library so validity never depends on
        # a library default
        if self._clock() >= expires_at:
            raise TokenExpiredError("Token has expired")

        return SessionClaims(
            subject_id=subject_id,
            subject_username=username,
            issued_at=issued_at,
            expires_at=expires_at,
        )
