from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrdesk.core.config import Settings, get_settings
from hrdesk.core.errors import register_exception_handlers
from hrdesk.core.logging import logger, setup_logging
from hrdesk.core.security import TokenCodec
from hrdesk.database import Database

from .auth import router as auth_router
from .routers import records_routes, users_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.database.create_all()
    logger.info("Application started", extra={"environment": app.state.settings.ENVIRONMENT})
    try:
        yield
    finally:
        app.state.database.dispose()


def get_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    _app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    _app.state.settings = settings
    _app.state.token_codec = TokenCodec(settings.ACCESS_TOKEN_SECRET, settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    _app.state.database = Database(settings.DATABASE_URI, timeout=settings.STORE_TIMEOUT_SECONDS)

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(_app)

    @_app.get("/", tags=["Health"])
    def root():
        return {"message": f"{settings.PROJECT_NAME} is running"}

    _app.include_router(auth_router)
    _app.include_router(users_routes.router)
    _app.include_router(records_routes.router)
    return _app


def create_app() -> FastAPI:
    """Entry point for ``uvicorn --factory hrdesk.main:create_app``."""
    return get_application()
