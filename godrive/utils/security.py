"""
Token helpers for web sessions and OAuth state
"""
import hashlib
import secrets
from typing import Tuple


def generate_session_token() -> Tuple[str, str]:
    """
    Generate a session token and its hash

    Returns:
        Tuple of (raw_token, hashed_token). Only the hash is ever stored.
    """
    raw_token = secrets.token_urlsafe(32)
    return raw_token, hash_token(raw_token)


def hash_token(token: str) -> str:
    """
    Hash a token using SHA256

    Returns:
        Hex-encoded hash (64 characters)
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def generate_state_token() -> str:
    """Random value for the OAuth2 `state` parameter"""
    return secrets.token_urlsafe(32)
