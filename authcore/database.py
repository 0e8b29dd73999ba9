"""Database engine, sessions and timestamps."""

from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from authcore.config import get_settings


def build_engine(url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """Create an engine for ``url``. SQLite connections are allowed across threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


settings = get_settings()
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
