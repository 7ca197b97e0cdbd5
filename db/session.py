"""
SQLAlchemy engine and session factory.

Environment variables
---------------------
``DATABASE_URL``
    Read through ``AppSettings``. Default: ``sqlite:///data/emotions.db``.

``DB_POOL_SIZE``
    Persistent connections in the pool for server databases (default ``5``).

``DB_MAX_OVERFLOW``
    Extra connections allowed above ``pool_size`` under burst load
    (default ``10``).

SQLite URLs skip the pool settings and get ``check_same_thread=False`` so
FastAPI's worker threads can share the engine.
"""

import os
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for *database_url*, creating the SQLite directory if needed."""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a sessionmaker bound to *engine*."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
