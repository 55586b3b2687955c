"""Engine and session factories for the transactions database."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from branch_reports.core.config import Settings, get_settings
from branch_reports.obs import instrument_sqlalchemy_engine


def build_engine(settings: Settings) -> Engine:
    """Create the engine, bounding statement time on PostgreSQL."""

    options: dict[str, Any] = {"pool_pre_ping": True}
    if settings.database_url.startswith("postgresql"):
        options["pool_size"] = settings.database_pool_size
        if settings.database_statement_timeout_ms:
            options["connect_args"] = {
                "options": f"-c statement_timeout={settings.database_statement_timeout_ms}"
            }
    engine = create_engine(settings.database_url, **options)
    if settings.enable_tracing:
        instrument_sqlalchemy_engine(engine)
    return engine


engine = build_engine(get_settings())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker[Session] = SessionLocal) -> Iterator[Session]:
    """Commit on success, roll back on error, always close."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["SessionLocal", "build_engine", "engine", "session_scope"]
