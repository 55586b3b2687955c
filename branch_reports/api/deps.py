"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy.orm import Session

from branch_reports.db.session import SessionLocal


def get_db_session() -> Iterator[Session]:
    """Yield a request-scoped session, discarding uncommitted work on failure."""

    session: Session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["get_db_session"]
