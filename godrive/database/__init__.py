"""
Database models and session management

Main exports:
- Base: SQLAlchemy declarative base for all models
- Models: User, StoredCredential, OAuthState, WebSession, AuditLog
- Session management: get_db (FastAPI dependency), get_db_context (context manager)
- Initialization: init_db
"""

from .models import (
    Base,
    User,
    StoredCredential,
    OAuthState,
    WebSession,
    AuditLog,
)
from .database import get_db, get_engine, init_db, close_db_connections
from .utils import get_db_context

__all__ = [
    'Base',
    'User',
    'StoredCredential',
    'OAuthState',
    'WebSession',
    'AuditLog',
    'get_db',
    'get_engine',
    'get_db_context',
    'init_db',
    'close_db_connections',
]
