"""
Configuration management
"""
import os
from typing import Any, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel


# ============================================
# CONFIGURATION DEFAULTS
# ============================================

class ConfigDefaults:
    """Default configuration values as constants"""

    # Application
    APP_NAME = "SGF Editor"
    DEFAULT_MIMETYPE = "application/x-go-sgf"
    DEFAULT_FILE_TITLE = "Untitled.sgf"
    DEFAULT_BOARD_SIZE = 19

    # Google OAuth
    CLIENT_SECRETS_PATH_DEFAULT = "config/client_secrets.json"
    CALLBACK_PATH_DEFAULT = "/"
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
    SCOPES_DEFAULT = [
        "openid",
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/userinfo.profile",
        "https://www.googleapis.com/auth/drive.file",
        "https://www.googleapis.com/auth/drive.install",
    ]
    REFRESH_THRESHOLD_MINUTES = 5
    REFRESH_MAX_RETRIES = 3
    REFRESH_BACKOFF_FACTOR = 2.0
    OAUTH_STATE_TTL_MINUTES = 10

    # Sessions
    SESSION_COOKIE_NAME = "godrive_session"
    SESSION_TTL_DAYS = 7

    # Database defaults
    DATABASE_URL_DEFAULT = "sqlite:///./godrive.db"

    # Logging defaults
    LOGGING_LEVEL_INFO = "INFO"
    LOGGING_FORMAT_CONSOLE = "console"

    # Server defaults
    SERVER_HOST_DEFAULT = "0.0.0.0"
    SERVER_PORT_DEFAULT = 8000

    # Config file defaults
    CONFIG_PATH_DEFAULT = "config/config.yaml"


# ============================================
# CONFIGURATION MODELS
# ============================================

class AppConfig(BaseModel):
    """Application identity and document defaults"""
    name: str = ConfigDefaults.APP_NAME
    default_mimetype: str = ConfigDefaults.DEFAULT_MIMETYPE
    default_title: str = ConfigDefaults.DEFAULT_FILE_TITLE
    board_size: int = ConfigDefaults.DEFAULT_BOARD_SIZE


class GoogleConfig(BaseModel):
    """Google OAuth2 client configuration"""
    client_secrets_path: str = ConfigDefaults.CLIENT_SECRETS_PATH_DEFAULT
    callback_path: str = ConfigDefaults.CALLBACK_PATH_DEFAULT
    scopes: List[str] = list(ConfigDefaults.SCOPES_DEFAULT)
    app_id: Optional[str] = None  # Drive SDK app id, used by the file picker
    refresh_threshold_minutes: int = ConfigDefaults.REFRESH_THRESHOLD_MINUTES
    refresh_max_retries: int = ConfigDefaults.REFRESH_MAX_RETRIES
    refresh_backoff_factor: float = ConfigDefaults.REFRESH_BACKOFF_FACTOR
    oauth_state_ttl_minutes: int = ConfigDefaults.OAUTH_STATE_TTL_MINUTES


class DatabaseConfig(BaseModel):
    """Database configuration"""
    url: str = ConfigDefaults.DATABASE_URL_DEFAULT


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = ConfigDefaults.LOGGING_LEVEL_INFO
    file: Optional[str] = None
    format: str = ConfigDefaults.LOGGING_FORMAT_CONSOLE


class SecurityConfig(BaseModel):
    """Security configuration"""
    encryption_key: Optional[str] = None
    session_cookie_name: str = ConfigDefaults.SESSION_COOKIE_NAME
    session_ttl_days: int = ConfigDefaults.SESSION_TTL_DAYS
    secure_cookies: bool = False


class ServerConfig(BaseModel):
    """Server configuration"""
    host: str = ConfigDefaults.SERVER_HOST_DEFAULT
    port: int = ConfigDefaults.SERVER_PORT_DEFAULT


class Config(BaseModel):
    """Main configuration"""
    app: AppConfig = AppConfig()
    google: GoogleConfig = GoogleConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    security: SecurityConfig = SecurityConfig()
    server: ServerConfig = ServerConfig()


def load_config(config_path: str = ConfigDefaults.CONFIG_PATH_DEFAULT) -> Config:
    """
    Load configuration from YAML file and environment variables.

    A missing file yields the defaults so the server can start from
    environment variables alone.
    """
    load_dotenv()

    if not os.path.exists(config_path):
        return Config()

    with open(config_path, 'r') as f:
        config_dict = yaml.safe_load(f) or {}

    config_dict = _replace_env_vars(config_dict)

    return Config(**config_dict)


def _replace_env_vars(obj: Any) -> Any:
    """
    Recursively replace ${VAR} placeholders with environment variables.

    Keys whose placeholder is unset are dropped so the model default applies.
    """
    if isinstance(obj, dict):
        replaced = {k: _replace_env_vars(v) for k, v in obj.items()}
        return {k: v for k, v in replaced.items() if v is not None}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        var_name = obj[2:-1]
        env_value = os.getenv(var_name)
        if env_value:
            return env_value
        return None
    return obj

