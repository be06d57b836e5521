"""
GoDrive SGF Editor API - Main Application
Thin JSON endpoints over Google Drive, with OAuth2 credential management
"""
import sys
import os
from pathlib import Path
from dotenv import load_dotenv
from contextlib import asynccontextmanager

# Load environment variables
load_dotenv()

# Add parent directory to path for godrive imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from googleapiclient.errors import HttpError

from godrive.core.exceptions import ClientSecretsError, ServiceUnavailableError
from godrive.database import init_db, close_db_connections
from godrive.sgf import NodeNotFoundError, SgfParseError, SgfValueError
from godrive.utils.logger import setup_logger, configure_logging

from api.base import google_error_response
from api.dependencies import AppState
from api.exceptions import APIException, create_error_response
from api.middleware import WebSessionMiddleware, ErrorHandlingMiddleware, RequestLoggingMiddleware
from api.routers import health, start, user, files

logger = setup_logger(__name__)


# ============================================
# APPLICATION LIFECYCLE
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager

    The server does not start without OAuth client secrets.
    """
    config = AppState.get_config()
    configure_logging(config.logging.level, config.logging.file, config.logging.format)

    # The database engine and token encryption read their settings from the environment
    os.environ.setdefault("DATABASE_URL", config.database.url)
    if config.security.encryption_key:
        os.environ.setdefault("ENCRYPTION_KEY", config.security.encryption_key)

    init_db()
    logger.info("[OK] Database initialized successfully")

    try:
        AppState.get_credential_manager()
    except ClientSecretsError as e:
        logger.error(f"[ERROR] Cannot start without OAuth client secrets: {e}")
        raise

    yield

    close_db_connections()
    logger.info("Shutting down GoDrive API")


# ============================================
# APPLICATION SETUP
# ============================================

app = FastAPI(
    title="GoDrive SGF Editor API",
    description="Store and edit Go game records (SGF) in Google Drive",
    version="1.0.0",
    lifespan=lifespan
)

# In production, set ALLOWED_ORIGINS environment variable (comma-separated)
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "*")
allowed_origins = [origin.strip() for origin in allowed_origins_env.split(",")] if allowed_origins_env != "*" else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_security = AppState.get_config().security

# Add middleware in reverse order (last added = first executed)
app.add_middleware(
    WebSessionMiddleware,
    cookie_name=_security.session_cookie_name,
    ttl_days=_security.session_ttl_days,
    secure=_security.secure_cookies
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ErrorHandlingMiddleware)


# ============================================
# EXCEPTION HANDLERS
# ============================================

@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    logger.warning(f"API error {exc.status_code} in {request.url.path}: {exc.error}")
    return create_error_response(
        error_type=exc.error,
        message=exc.message or str(exc.detail),
        details=exc.details,
        status_code=exc.status_code
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return create_error_response(
        error_type="validation_error",
        message="Invalid request",
        details=details,
        status_code=400
    )


@app.exception_handler(HttpError)
async def google_http_error_handler(request: Request, exc: HttpError):
    logger.warning(f"Google API error in {request.url.path}: {exc.resp.status} {exc.reason}")
    return google_error_response(exc)


@app.exception_handler(SgfParseError)
@app.exception_handler(SgfValueError)
async def sgf_error_handler(request: Request, exc: Exception):
    return create_error_response(error_type="validation_error", message=str(exc), status_code=400)


@app.exception_handler(NodeNotFoundError)
async def node_not_found_handler(request: Request, exc: NodeNotFoundError):
    return create_error_response(error_type="not_found", message=str(exc), status_code=404)


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    logger.error(f"Google service unavailable in {request.url.path}: {exc}")
    return create_error_response(error_type="service_unavailable", message=str(exc), status_code=503)


@app.exception_handler(ClientSecretsError)
async def client_secrets_handler(request: Request, exc: ClientSecretsError):
    logger.error(f"OAuth client secrets unavailable: {exc}")
    return create_error_response(error_type="configuration_error", message=str(exc), status_code=500)


# ============================================
# INCLUDE ROUTERS
# ============================================

app.include_router(health.router)   # Health checks
app.include_router(start.router)    # OAuth2 callback, Drive UI entry, view, logout
app.include_router(user.router)     # User profile and Drive about
app.include_router(files.router)    # SGF documents
