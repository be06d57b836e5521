"""
Database connection and session management
"""
import os
from typing import Generator, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool

from .models import Base
from ..utils.config import ConfigDefaults
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

# Lazy-loaded engine and session factory
_engine: Optional[Engine] = None
_SessionLocal = None


def _get_database_url() -> str:
    """
    Get DATABASE_URL from environment, loading .env file if needed

    Returns:
        Database connection URL
    """
    load_dotenv(override=False)
    return os.getenv('DATABASE_URL') or ConfigDefaults.DATABASE_URL_DEFAULT


def get_engine() -> Engine:
    """
    Get or create database engine (lazy-loaded)

    Connection pooling configuration:
    - SQLite: StaticPool (single connection)
    - Others: QueuePool (5-15 connections)
    """
    global _engine

    if _engine is None:
        database_url = _get_database_url()
        if database_url.startswith('sqlite'):
            _engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
            logger.info("Database engine created: SQLite")
        else:
            _engine = create_engine(
                database_url,
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
                pool_recycle=3600,
                pool_pre_ping=True,
                poolclass=QueuePool,
                echo=False
            )

            @event.listens_for(_engine, "connect")
            def receive_connect(dbapi_conn, connection_record):
                logger.debug("Database connection established")

            logger.info("Database engine created (pool_size=5, max_overflow=10)")

    return _engine


def get_session_local():
    """Get or create session factory (lazy-loaded)"""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
            expire_on_commit=False
        )

    return _SessionLocal


def init_db() -> None:
    """
    Initialize database tables
    """
    try:
        Base.metadata.create_all(bind=get_engine())
        logger.info("[OK] Database tables created successfully")
    except Exception as e:
        logger.error(f"[ERROR] Failed to create database tables: {e}", exc_info=True)
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI

    Usage:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def close_db_connections() -> None:
    """
    Close all database connections and dispose engine

    The next get_engine() call re-reads DATABASE_URL.
    """
    global _engine, _SessionLocal

    if _engine:
        _engine.dispose()
        logger.info("Database connections closed")

    _engine = None
    _SessionLocal = None
