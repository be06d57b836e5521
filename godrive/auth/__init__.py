"""
Authentication module - OAuth credentials, client secrets and web sessions
"""
from .client_secrets import ClientSecrets, load_client_secrets
from .credential_manager import CredentialManager, CodeExchangeError
from .oauth import SCOPES, build_flow
from .session import (
    create_session,
    get_session,
    set_session_user,
    delete_session,
    cleanup_expired_sessions,
)

__all__ = [
    'ClientSecrets',
    'load_client_secrets',
    'CredentialManager',
    'CodeExchangeError',
    'SCOPES',
    'build_flow',
    'create_session',
    'get_session',
    'set_session_user',
    'delete_session',
    'cleanup_expired_sessions',
]
