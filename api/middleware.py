"""
API Middleware
Custom middleware for web sessions, error handling and request logging
"""
import uuid
from datetime import datetime
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from godrive.auth import get_session
from godrive.database.database import get_session_local
from godrive.utils.config import ConfigDefaults
from godrive.utils.logger import setup_logger

from .exceptions import create_error_response

logger = setup_logger(__name__)


class WebSessionMiddleware(BaseHTTPMiddleware):
    """
    Middleware for browser sessions

    Loads the session named by the session cookie into
    request.state.web_session, and sets the cookie when an endpoint created
    a session during the request (request.state.new_session_token).
    """

    def __init__(
        self,
        app,
        cookie_name: str = ConfigDefaults.SESSION_COOKIE_NAME,
        ttl_days: int = ConfigDefaults.SESSION_TTL_DAYS,
        secure: bool = False
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age = ttl_days * 24 * 60 * 60
        self.secure = secure

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Attach the session, process the request, set the cookie of a new session"""
        request.state.web_session = None
        request.state.new_session_token = None

        raw_session_token = request.cookies.get(self.cookie_name)
        if raw_session_token:
            db = get_session_local()()
            try:
                request.state.web_session = get_session(db, raw_session_token)
            finally:
                db.close()

            if request.state.web_session is not None:
                logger.debug(f"Session attached: user_id={request.state.web_session.user_id}")

        response = await call_next(request)

        new_token = getattr(request.state, 'new_session_token', None)
        if new_token:
            response.set_cookie(
                key=self.cookie_name,
                value=new_token,
                max_age=self.max_age,
                httponly=True,
                secure=self.secure,
                samesite="lax"  # the OAuth2 callback is a top-level GET from Google
            )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for consistent error handling

    Assigns a request id and turns unexpected exceptions into 500 responses.
    Known exceptions are converted by the handlers registered in api.main.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with error handling"""
        # Generate request ID for tracing
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            # Unexpected error - log and return formatted response
            logger.error(f"Unexpected error [{request_id}] in {request.url.path}: {e}", exc_info=True)

            # Don't expose internal error details to clients
            return create_error_response(
                error_type="internal_server_error",
                message="An unexpected error occurred. Please try again later.",
                status_code=500
            )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request/response logging

    Logs all requests with timing information
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request and response with metadata"""
        start_time = datetime.now()
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.info(f"[{request_id}] → {request.method} {request.url.path}")

        response = await call_next(request)

        duration = (datetime.now() - start_time).total_seconds()

        user_info = ""
        web_session = getattr(request.state, 'web_session', None)
        if web_session is not None and web_session.user_id:
            user_info = f" | user={web_session.user_id}"

        logger.info(
            f"[{request_id}] ← {request.method} {request.url.path} - "
            f"{response.status_code} ({duration:.2f}s){user_info}"
        )

        return response
