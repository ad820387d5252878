"""Application factory for the records API."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from records_api.core.config import Settings, get_settings
from records_api.core.errors import NotFoundError, ValidationError
from records_api.core.logging import setup_logging
from records_api.repositories.json_storage import RecordStore, StorageError
from records_api.repositories.models import PostRecord, UserRecord
from records_api.routers import auth as auth_router
from records_api.routers import posts as posts_router
from records_api.routers import profile as profile_router
from records_api.services.auth_service import AuthService
from records_api.services.post_service import PostService
from records_api.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

STORAGE_ERROR_MESSAGE = "An error occurred. Please try again later."


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return PlainTextResponse(STORAGE_ERROR_MESSAGE, status_code=500)

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError):
        return PlainTextResponse("Invalid request body.", status_code=400)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title="Records API")
    users = RecordStore(settings.user_data_path, UserRecord)
    posts = RecordStore(settings.post_data_path, PostRecord)
    app.state.settings = settings
    app.state.auth_service = AuthService(users)
    app.state.post_service = PostService(posts, users)
    app.state.profile_service = ProfileService(users)

    app.include_router(auth_router.router)
    app.include_router(posts_router.router)
    app.include_router(profile_router.router)
    _register_error_handlers(app)
    logger.info("Records API ready (env=%s, users=%s, posts=%s)", settings.app_env, users.path, posts.path)
    return app
