"""File Uploader - FastAPI Application Factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from fileuploader.api import api_router
from fileuploader.api.files import router as files_router
from fileuploader.api.health import router as health_router
from fileuploader.api.pages import router as pages_router
from fileuploader.core import (
    build_engine,
    build_session_maker,
    create_tables,
    settings,
    setup_logging,
)
from fileuploader.core.config import Settings
from fileuploader.core.logging import get_logger

# Import all models to ensure they're registered with Base
from fileuploader.models import Account, StoredFile  # noqa: F401
from fileuploader.services.credentials import Argon2PasswordHasher
from fileuploader.services.gate import AuthenticationGate
from fileuploader.services.revocation import RevocationRegistry
from fileuploader.services.tokens import SessionTokenCodec

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    config: Settings = app.state.settings

    setup_logging(
        level=config.log_level,
        format_type="structured" if not config.debug else "dev",
    )
    logger.info(f"Starting {config.app_name} v{config.app_version}")

    for warning in config.check_security_configuration():
        logger.warning(f"SECURITY: {warning}")

    await create_tables(app.state.engine)

    Path(config.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"Storing uploads in {config.upload_dir}")

    yield

    logger.info("Shutting down...")
    await app.state.engine.dispose()


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Everything stateful is built here from ``config`` and kept on
    ``app.state``: the database engine and session factory, and the
    authentication core. Every request handler shares the same revocation
    registry; its retention window is the session lifetime, so the two are
    never configured separately.
    """
    config = config or settings

    app = FastAPI(
        title=config.app_name,
        description="Multi-user image upload service",
        version=config.app_version,
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
        openapi_url="/openapi.json" if config.debug else None,
    )

    engine = build_engine(config)
    codec = SessionTokenCodec.from_settings(config)
    registry = RevocationRegistry(retention=config.session_lifetime)

    app.state.settings = config
    app.state.engine = engine
    app.state.session_maker = build_session_maker(engine)
    app.state.codec = codec
    app.state.revocations = registry
    app.state.gate = AuthenticationGate(codec, registry)
    app.state.password_hasher = Argon2PasswordHasher.from_settings(config)

    # Include routers
    app.include_router(health_router)  # Health at root level
    app.include_router(api_router)  # API at /api/v1
    app.include_router(files_router)  # File serving at /files and /public/files
    app.include_router(pages_router)  # Browser test page at /

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "fileuploader.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# Application instance
app = create_app()
