"""
API Dependencies
Provides shared dependencies for FastAPI routers using proper dependency injection
"""
import os
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from godrive.auth import CredentialManager
from godrive.database import get_db
from godrive.utils.config import load_config, Config, ConfigDefaults
from godrive.utils.logger import setup_logger

from .base import GoDriveEndpoint

logger = setup_logger(__name__)


# ============================================
# APPLICATION STATE (Singleton Pattern)
# ============================================

class AppState:
    """Application state holder for singleton instances"""
    _config: Optional[Config] = None
    _credential_manager: Optional[CredentialManager] = None

    @classmethod
    def get_config(cls) -> Config:
        """Get or create config singleton"""
        if cls._config is None:
            cls._config = load_config(os.getenv("GODRIVE_CONFIG", ConfigDefaults.CONFIG_PATH_DEFAULT))
            logger.info("[OK] Configuration loaded")
        return cls._config

    @classmethod
    def get_credential_manager(cls) -> CredentialManager:
        """
        Get or create the credential manager singleton

        Raises:
            ClientSecretsError: If the OAuth client secrets cannot be loaded
        """
        if cls._credential_manager is None:
            cls._credential_manager = CredentialManager.from_config(cls.get_config())
            logger.info("[OK] Credential manager initialized")
        return cls._credential_manager

    @classmethod
    def reset(cls) -> None:
        """Drop singletons (tests, config reload)"""
        cls._config = None
        cls._credential_manager = None


# ============================================
# DEPENDENCY FUNCTIONS
# ============================================

def get_config() -> Config:
    """Get configuration"""
    return AppState.get_config()


def get_credential_manager() -> CredentialManager:
    """Get the OAuth2 credential manager"""
    return AppState.get_credential_manager()


def get_godrive(
    request: Request,
    db: Session = Depends(get_db),
    config: Config = Depends(get_config),
    credential_manager: CredentialManager = Depends(get_credential_manager)
) -> GoDriveEndpoint:
    """
    Request helper for GoDrive endpoints

    Usage:
        @router.get("/user")
        def user(godrive: GoDriveEndpoint = Depends(get_godrive)):
            credentials = godrive.require_credential()
    """
    return GoDriveEndpoint(request, db, config, credential_manager)
