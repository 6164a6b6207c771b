"""
Database configuration and session management.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool


# Create declarative base
Base = declarative_base()


def _is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine.

    In-memory SQLite databases live inside a single connection, so they get a
    StaticPool; everything else uses NullPool and leaves pooling to the server.
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if _is_in_memory_sqlite(database_url):
            return create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(database_url, echo=echo, connect_args=connect_args)

    return create_engine(database_url, echo=echo, poolclass=NullPool)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory; objects stay readable after commit."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


def create_all_tables(engine: Engine) -> None:
    """Create every table known to the models module."""
    # Register the models on Base.metadata
    from invoiceme.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine: Engine) -> None:
    from invoiceme.infrastructure.db import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)


