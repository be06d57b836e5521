"""
Database Utilities
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session

from .database import get_session_local


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions (for non-FastAPI contexts).

    Commits on success, rolls back on error.

    Usage:
        with get_db_context() as db:
            user = db.query(User).first()

    Note: For FastAPI route handlers, use `get_db()` dependency injection instead.
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
