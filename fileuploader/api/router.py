"""File Uploader API Router - aggregates the versioned API routes."""

from fastapi import APIRouter

from fileuploader.api import auth, files

# Main API router - all routes will be prefixed with /api/v1
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(files.upload_router)
