"""
Database configuration and base model.

Uses SQLAlchemy 2.0 declarative style with SQLite.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import PATHS


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


DATABASE_URL = f"sqlite:///{PATHS.database}"


def make_engine(url: str = DATABASE_URL) -> Engine:
    """Create a SQLAlchemy engine (no connection is opened until first use)."""
    return create_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
    )


engine = make_engine()

# Session factory
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def get_session(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """Context manager for database sessions."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize the database, creating all tables."""
    if bind is None:
        PATHS.ensure_directories()
        bind = engine
    Base.metadata.create_all(bind=bind)


def reset_db(bind: Optional[Engine] = None) -> None:
    """Drop and recreate all tables. USE WITH CAUTION."""
    bind = bind or engine
    Base.metadata.drop_all(bind=bind)
    Base.metadata.create_all(bind=bind)
