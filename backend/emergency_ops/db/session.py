"""
Database engine and session management.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core.config import DatabaseConfig, get_config
from .base import Base


def build_engine(config: Optional[DatabaseConfig] = None) -> Engine:
    """
    Create a SQLAlchemy engine for the report store.

    In-memory SQLite URLs share one connection across threads so that the
    store's worker threads see the same database.
    """
    config = config or get_config().database
    url = config.url

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=config.echo, **kwargs)

    return create_engine(
        url,
        echo=config.echo,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )


def create_tables(engine: Engine) -> None:
    # Registers the report table on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Transactional session: commit on success, rollback on error.

    Yields:
        SQLAlchemy Session instance
    """
    db: Session = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
