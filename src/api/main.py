"""FastAPI application entry point."""

import logging
import os
import time
from contextlib import asynccontextmanager
from importlib import metadata
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from adapter.fake.user_repository import FakeUserRepository
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.indexes import ensure_all_indexes
from adapter.mongodb.user_repository import MongoUserRepository
from api.config import Settings
from api.dependencies import get_settings
from api.errors import install_error_handlers
from api.pipeline import mount_router
from api.routes import auth, health, users
from api.routing import Router
from api.security import Clock, TokenService, utc_now
from port.user_repository import UserRepository
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "users-api"

try:
    VERSION = metadata.version(DISTRIBUTION_NAME)
except metadata.PackageNotFoundError:
    # running from a source checkout that was never installed
    VERSION = "0.0.0"

SERVICE_NAME = "Users API"
API_VERSIONS = ("v1",)


def build_router() -> Router:
    """Route table for every supported API version."""
    router = Router()
    for version in API_VERSIONS:
        users.register(router, version=version)
        auth.register(router, version=version)
    return router


def _default_user_repo(settings: Settings) -> UserRepository:
    if not settings.mongo_url:
        logger.warning("MONGO_URL not set, using in-memory user store")
        return FakeUserRepository()

    client = get_mongodb_client(settings.mongo_url)
    if client is None:
        raise RuntimeError("MongoDB unavailable")
    db = client[settings.database_name]
    if ensure_all_indexes(db):
        logger.info("MongoDB indexes verified/created successfully")
    else:
        logger.warning("Failed to create some MongoDB indexes")
    return MongoUserRepository(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: connect persistence on startup."""
    if getattr(app.state, "users", None) is None:
        app.state.users = _default_user_repo(app.state.settings)
    logger.info(
        "Service started",
        extra={"versioning": app.state.settings.versioning, "versions": list(API_VERSIONS)},
    )
    yield


def create_app(
    settings: Settings,
    user_repo: Optional[UserRepository] = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """Build the application around one immutable Settings object.

    ``user_repo`` defaults to MongoDB when MONGO_URL is configured; tests
    pass a FakeUserRepository and a fixed ``clock``.
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Versioned REST API for user accounts and token login",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.users = user_repo
    app.state.tokens = TokenService(settings, clock=clock)

    # Browsers don't support credentials with a wildcard origin
    wildcard = "*" in settings.cors_origins
    if wildcard:
        logger.warning("CORS configured with wildcard origin ('*')")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else list(settings.cors_origins),
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request handled",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "durationMs": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response

    install_error_handlers(app)

    app.include_router(health.router)

    @app.get("/", tags=["meta"])
    async def root(settings: Settings = Depends(get_settings)):
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "running",
            "versioning": settings.versioning,
            "api_versions": list(API_VERSIONS),
        }

    router = build_router()
    mount_router(app, router, settings)
    app.state.router = router
    return app


def main():
    import uvicorn

    settings = Settings.from_env()
    setup_structured_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        access_log=False,
    )


if __name__ == "__main__":
    main()
