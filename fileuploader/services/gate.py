"""Authentication gate: revocation check plus token validation for one request."""

import logging
from dataclasses import dataclass

from fileuploader.services.errors import (
    InvalidTokenError,
    MissingTokenError,
    TokenError,
    TokenRevokedError,
)
from fileuploader.services.revocation import RevocationRegistry
from fileuploader.services.tokens import SessionTokenCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated subject of a single request."""

    subject_id: int
    subject_username: str


class AuthenticationGate:
    """Authorizes requests by bearer token.

    Checks run in a fixed order: presence, revocation, then signature and
    expiry. A revoked token is reported as revoked even if it has since
    expired or was forged.
    """

    def __init__(self, codec: SessionTokenCodec, registry: RevocationRegistry):
        self.codec = codec
        self.registry = registry

    def authenticate(self, token: str | None) -> Identity:
        if not token:
            raise MissingTokenError("Missing authorization token")

        if self.registry.is_revoked(token):
            raise TokenRevokedError("Token has been revoked")

        try:
            claims = self.codec.validate(token)
        except TokenError as e:
            raise InvalidTokenError(str(e)) from e

        return Identity(subject_id=claims.subject_id, subject_username=claims.subject_username)

    def revoke(self, token: str) -> None:
        self.registry.revoke(token)
