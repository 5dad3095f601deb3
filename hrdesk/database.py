from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from hrdesk.core.logging import logger

Base = declarative_base()


def _engine_options(uri: str, timeout: int) -> dict[str, Any]:
    url = make_url(uri)
    if url.get_backend_name() == "sqlite":
        options: dict[str, Any] = {
            "connect_args": {"check_same_thread": False, "timeout": timeout},
        }
        # In-memory databases live as long as their single connection
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,
        "pool_timeout": timeout,
        "connect_args": {
            "connect_timeout": timeout,
            "read_timeout": timeout,
            "write_timeout": timeout,
        },
    }


class Database:
    """Owns the engine and session factory for the lifetime of the app."""

    def __init__(self, uri: str, timeout: int = 5):
        self.engine = create_engine(uri, **_engine_options(uri, timeout))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # Registers the tables on Base.metadata
        from hrdesk.models import records, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Store schema ready", extra={"backend": self.engine.url.get_backend_name()})

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Store connections released")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
