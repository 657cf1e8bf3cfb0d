"""Authentication API endpoints and request-authentication dependencies."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fileuploader.core import get_db
from fileuploader.schemas.auth import (
    AccountResponse,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)
from fileuploader.services.credentials import CredentialStore
from fileuploader.services.errors import (
    DuplicateUsernameError,
    InvalidAccountInputError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    StorageError,
    TokenRevokedError,
)
from fileuploader.services.gate import AuthenticationGate, Identity
from fileuploader.services.tokens import SessionTokenCodec

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

router = APIRouter(tags=["auth"])


# --- Dependencies ---


def get_gate(request: Request) -> AuthenticationGate:
    """The process-wide gate built by create_app()."""
    return request.app.state.gate


def get_codec(request: Request) -> SessionTokenCodec:
    return request.app.state.codec


def get_credential_store(request: Request, db: AsyncSession = Depends(get_db)) -> CredentialStore:
    """Dependency to get a credential store bound to this request's session."""
    return CredentialStore(
        db,
        request.app.state.password_hasher,
        password_min_length=request.app.state.settings.password_min_length,
    )


async def extract_token(request: Request) -> str | None:
    """Extract the bearer token from a request.

    Checks ``Authorization: Bearer <token>`` first, then a ``token`` field in
    a form body, then a ``token`` query parameter.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None  # Remove "Bearer " prefix

    content_type = request.headers.get("Content-Type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        token = form.get("token")
        if isinstance(token, str) and token:
            return token

    return request.query_params.get("token") or None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    request: Request,
    token: str | None = Depends(extract_token),
    gate: AuthenticationGate = Depends(get_gate),
) -> Identity:
    """Dependency to authenticate the request and expose its identity.

    The identity is also stored on ``request.state`` for the remainder of
    this request only.
    """
    path = request.url.path
    try:
        identity = gate.authenticate(token)
    except MissingTokenError as e:
        logger.warning(f"Request without token: {request.method} {path}")
        raise _unauthorized(str(e)) from e
    except TokenRevokedError as e:
        logger.warning(f"Revoked token used for: {request.method} {path}")
        raise _unauthorized(str(e)) from e
    except InvalidTokenError as e:
        logger.warning(f"Invalid token for: {request.method} {path} - {e.reason}")
        raise _unauthorized(f"Invalid token: {e.reason}") from e

    request.state.identity = identity
    return identity


# --- Endpoints ---


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    store: CredentialStore = Depends(get_credential_store),
    codec: SessionTokenCodec = Depends(get_codec),
) -> AuthResponse:
    """Create an account and return a session token for it.

    Returns 400 if the password policy is not met and 409 if the username
    is taken.
    """
    try:
        account = await store.create_account(body.username, body.password)
    except InvalidAccountInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except DuplicateUsernameError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists",
        ) from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        ) from e

    return AuthResponse(
        token=codec.issue(account.id, account.username),
        user=AccountResponse.model_validate(account),
        message="User registered successfully",
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
    codec: SessionTokenCodec = Depends(get_codec),
) -> AuthResponse:
    """Authenticate with username and password and get a session token."""
    if not body.username or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required",
        )

    try:
        account = await store.authenticate(body.username, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error",
        ) from e

    logger.info(f"User logged in: {account.username}")
    return AuthResponse(
        token=codec.issue(account.id, account.username),
        user=AccountResponse.model_validate(account),
        message="Login successful",
    )


@router.post("/revoke", response_model=MessageResponse)
async def revoke(
    identity: Identity = Depends(get_current_identity),
    token: str | None = Depends(extract_token),
    gate: AuthenticationGate = Depends(get_gate),
) -> MessageResponse:
    """Log out by revoking the presented token for the rest of its lifetime."""
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No token provided")
    gate.revoke(token)
    logger.info(f"Token revoked for user: {identity.subject_username}")
    return MessageResponse(message="Token revoked successfully")
