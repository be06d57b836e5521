"""
Shared utilities: configuration, logging, token encryption and hashing
"""
from .config import Config, ConfigDefaults, load_config
from .logger import setup_logger, configure_logging
from .encryption import (
    TokenEncryption,
    encrypt_token,
    decrypt_token,
    generate_key,
    get_encryption,
)
from .security import generate_session_token, hash_token, generate_state_token

__all__ = [
    'Config',
    'ConfigDefaults',
    'load_config',
    'setup_logger',
    'configure_logging',
    'TokenEncryption',
    'encrypt_token',
    'decrypt_token',
    'generate_key',
    'get_encryption',
    'generate_session_token',
    'hash_token',
    'generate_state_token',
]
