"""
Token Encryption Module

Encrypts OAuth tokens with Fernet before they are written to the credential
store and decrypts them when a credential is loaded.

Keys:
    - ENCRYPTION_KEY holding a 44-character Fernet key is used as-is
    - Any other non-empty ENCRYPTION_KEY is stretched with PBKDF2-SHA256
    - No key at all generates a process-local key (with warning); stored
      credentials then do not survive a restart
"""
import base64
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .logger import setup_logger

logger = setup_logger(__name__)

_KDF_SALT = b'godrive_credential_salt'
_KDF_ITERATIONS = 100000
_FERNET_ALPHABET = set('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_=')

# Singleton instance
_encryption_instance: Optional['TokenEncryption'] = None


def _derive_key(secret: str) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode('utf-8')))


def _looks_like_fernet_key(key: str) -> bool:
    return len(key) == 44 and all(c in _FERNET_ALPHABET for c in key)


class TokenEncryption:
    """
    Token encryption/decryption using Fernet symmetric encryption.

    Example:
        encryption = TokenEncryption()
        encrypted = encryption.encrypt("ya29.access-token")
        decrypted = encryption.decrypt(encrypted)
    """

    def __init__(self, key: Optional[str] = None):
        """
        Args:
            key: Fernet key or passphrase. Defaults to ENCRYPTION_KEY.
        """
        if key is None:
            key = os.getenv('ENCRYPTION_KEY')

        key = (key or '').strip()

        if not key:
            logger.warning(
                "ENCRYPTION_KEY not set. Generated a new key. "
                "Stored credentials will not be readable after a restart."
            )
            key_bytes = Fernet.generate_key()
        elif _looks_like_fernet_key(key):
            key_bytes = key.encode('utf-8')
        else:
            logger.info("ENCRYPTION_KEY is not a Fernet key; deriving one with PBKDF2")
            key_bytes = _derive_key(key)

        try:
            self.fernet = Fernet(key_bytes)
        except ValueError:
            # 44 chars from the right alphabet that still do not decode to 32 bytes
            logger.info("ENCRYPTION_KEY failed Fernet validation; deriving one with PBKDF2")
            self.fernet = Fernet(_derive_key(key))

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a token.

        Raises:
            TypeError: If plaintext is None
        """
        if plaintext is None:
            raise TypeError("Cannot encrypt None value")

        return self.fernet.encrypt(plaintext.encode('utf-8')).decode('utf-8')

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a token.

        Raises:
            TypeError: If ciphertext is None
            ValueError: If ciphertext is empty
            InvalidToken: If the ciphertext was produced with another key or was tampered with
        """
        if ciphertext is None:
            raise TypeError("Cannot decrypt None value")

        if not ciphertext or not isinstance(ciphertext, str):
            raise ValueError(f"Cannot decrypt invalid ciphertext: {type(ciphertext)}")

        try:
            return self.fernet.decrypt(ciphertext.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            logger.warning(
                f"Decryption failed (ciphertext length: {len(ciphertext)}). "
                "Token may be encrypted with a different key or corrupted."
            )
            raise


def generate_key() -> str:
    """
    Generate a new Fernet encryption key.

    Returns:
        Base64-encoded Fernet key (44 characters)
    """
    return Fernet.generate_key().decode('utf-8')


def get_encryption() -> TokenEncryption:
    """Get the singleton encryption instance."""
    global _encryption_instance

    if _encryption_instance is None:
        _encryption_instance = TokenEncryption()

    return _encryption_instance


def encrypt_token(token: str) -> str:
    """Encrypt a token using the singleton instance."""
    return get_encryption().encrypt(token)


def decrypt_token(encrypted_token: str) -> str:
    """Decrypt a token using the singleton instance."""
    return get_encryption().decrypt(encrypted_token)
