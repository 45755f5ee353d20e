"""Database engine, session management and shared model columns.

Only per-user category preferences are persisted; recipes, meal plans and
inventory are owned by other services and arrive in request bodies.
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import Column, DateTime, create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from src.config import get_settings


def build_engine(database_url: str) -> Engine:
    """Create an engine, allowing SQLite connections to cross FastAPI's threadpool."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(get_settings().database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


class TimestampMixin:
    """created_at / updated_at columns maintained by the database."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the preference tables if they do not exist yet."""
    # Importing the models registers them with Base.metadata
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
