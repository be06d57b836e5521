"""
GoDrive endpoint helper

Per-request helper injected into every router: JSON responses, the OAuth2
login/callback dance, session credentials and Google service construction.

    @router.get("/view/{file_id}")
    def view(file_id: str, godrive: GoDriveEndpoint = Depends(get_godrive)):
        redirect = godrive.login_if_required(file_id)
        if redirect:
            return redirect
        ...
"""
from typing import Any, Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError
from sqlalchemy.orm import Session

from godrive.auth import (
    ClientSecrets,
    CodeExchangeError,
    CredentialManager,
    create_session,
    delete_session,
    set_session_user,
)
from godrive.auth.audit import AuditEventType, log_auth_event
from godrive.core import GoogleDriveClient, GoogleOAuth2Client
from godrive.core.exceptions import ServiceUnavailableError
from godrive.database.models import WebSession
from godrive.services import DocumentService
from godrive.utils.config import Config, ConfigDefaults
from godrive.utils.logger import setup_logger

from .exceptions import AuthenticationError, OAuthCallbackError, create_error_response, error_slug

logger = setup_logger(__name__)

APPLICATION_NAME = ConfigDefaults.APP_NAME
KEY_SESSION_USERID = "user_id"
DEFAULT_MIMETYPE = ConfigDefaults.DEFAULT_MIMETYPE
KEY_STATE_PARAM = "file_id"


def google_error_response(e: HttpError) -> JSONResponse:
    """Error response carrying the status and reason of a Google API error"""
    status_code = e.resp.status if e.resp is not None else 500
    return create_error_response(
        error_type=error_slug(status_code),
        message=e.reason or str(e),
        status_code=status_code
    )


class GoDriveEndpoint:
    """Request-scoped access to session, credentials and Google services"""

    def __init__(
        self,
        request: Request,
        db: Session,
        config: Config,
        credential_manager: CredentialManager
    ):
        self.request = request
        self.db = db
        self.config = config
        self.credential_manager = credential_manager

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def send_json(self, obj: Any, code: int = 200) -> JSONResponse:
        return JSONResponse(status_code=code, content=obj)

    def send_error(self, code: int, message: str) -> JSONResponse:
        return create_error_response(error_type=error_slug(code), message=message, status_code=code)

    def send_google_json_response_error(self, e: HttpError) -> JSONResponse:
        logger.warning(f"Google API error {e.resp.status}: {e.reason}")
        return google_error_response(e)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def web_session(self) -> Optional[WebSession]:
        return getattr(self.request.state, 'web_session', None)

    @property
    def session_user_id(self) -> Optional[str]:
        """Google user id stored in the session (KEY_SESSION_USERID)"""
        web_session = self.web_session
        return getattr(web_session, KEY_SESSION_USERID) if web_session else None

    def _ensure_session(self) -> WebSession:
        """Current session, created on first use; the middleware sets the cookie"""
        if self.web_session is None:
            raw_token, web_session = create_session(self.db, self.config.security.session_ttl_days)
            self.request.state.web_session = web_session
            self.request.state.new_session_token = raw_token
        return self.web_session

    def _set_session_user(self, user_id: Optional[str]) -> None:
        web_session = set_session_user(self.db, self._ensure_session(), user_id)
        self.request.state.web_session = web_session

    def _start_user_session(self, user_id: str) -> None:
        """Replace the current session by a new one, with a new token, for user_id"""
        raw_token, web_session = create_session(self.db, self.config.security.session_ttl_days, user_id=user_id)
        old_token = self.request.cookies.get(self.config.security.session_cookie_name)
        if old_token:
            delete_session(self.db, old_token)
        self.request.state.web_session = web_session
        self.request.state.new_session_token = raw_token

    # ------------------------------------------------------------------
    # OAuth2
    # ------------------------------------------------------------------

    def redirect_uri(self) -> str:
        """Callback URL for this request's host"""
        url = self.request.url
        return f"{url.scheme}://{url.netloc}{self.config.google.callback_path}"

    def get_client_secrets(self) -> ClientSecrets:
        """Client secrets the credential manager was built with (read once at startup)"""
        return self.credential_manager.client_secrets

    def login_if_required(self, state_param: Optional[str] = None) -> Optional[RedirectResponse]:
        """
        Redirect to the consent screen when there is no usable credential

        Args:
            state_param: File id to come back to after login

        Returns:
            Redirect response, or None when already logged in
        """
        if self.get_credential() is not None:
            return None

        web_session = self._ensure_session()
        state = self.credential_manager.create_state(self.db, web_session.session_token, file_id=state_param)
        url, _ = self.credential_manager.get_authorization_url(self.redirect_uri(), state)
        logger.info("Redirecting to OAuth2 consent", file_id=state_param)
        return RedirectResponse(url, status_code=302)

    def handle_callback_if_required(self) -> Optional[RedirectResponse]:
        """
        Complete the OAuth2 flow when the request carries an authorization code

        Returns:
            Redirect to the remembered file (or "/"), or None without a code

        Raises:
            OAuthCallbackError: On an invalid state, code or userinfo failure
        """
        code = self.request.query_params.get('code')
        if not code:
            return None

        web_session = self.web_session
        state = self.credential_manager.consume_state(
            self.db,
            self.request.query_params.get('state'),
            web_session.session_token if web_session else None
        )
        if state is None:
            log_auth_event(
                self.db,
                AuditEventType.LOGIN_FAILURE,
                success=False,
                error_message="Invalid or expired OAuth state",
                request=self.request
            )
            raise OAuthCallbackError("Invalid or expired OAuth state. Please log in again.")

        try:
            credentials = self.credential_manager.retrieve(code, self.redirect_uri())
            profile = self.get_oauth2_service(credentials).userinfo()
        except (CodeExchangeError, HttpError, ServiceUnavailableError) as e:
            logger.warning(f"OAuth2 callback failed: {e}")
            log_auth_event(
                self.db,
                AuditEventType.LOGIN_FAILURE,
                success=False,
                error_message=str(e),
                request=self.request
            )
            raise OAuthCallbackError() from e

        user_id = profile['id']
        self.credential_manager.save(self.db, user_id, credentials, profile)
        self._start_user_session(user_id)
        log_auth_event(
            self.db,
            AuditEventType.LOGIN_SUCCESS,
            user_id=user_id,
            request=self.request,
            email=profile.get('email')
        )

        file_id = getattr(state, KEY_STATE_PARAM)
        target = f"/view/{quote(file_id, safe='')}" if file_id else "/"
        return RedirectResponse(target, status_code=302)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_credential(self) -> Optional[Credentials]:
        """Credential of the session user, None if not logged in"""
        user_id = self.session_user_id
        if not user_id:
            return None
        return self.credential_manager.get(self.db, user_id)

    def require_credential(self) -> Credentials:
        """
        Raises:
            AuthenticationError: If the session has no usable credential
        """
        credentials = self.get_credential()
        if credentials is None:
            raise AuthenticationError("Login required")
        return credentials

    def delete_credential(self) -> None:
        """Delete the session user's credential and log them out"""
        user_id = self.session_user_id
        if not user_id:
            return

        self.credential_manager.delete(self.db, user_id)
        self._set_session_user(None)
        log_auth_event(self.db, AuditEventType.LOGOUT, user_id=user_id, request=self.request)

    # ------------------------------------------------------------------
    # Google services
    # ------------------------------------------------------------------

    def get_drive_service(self, credentials: Credentials) -> GoogleDriveClient:
        return GoogleDriveClient(self.config, credentials)

    def get_oauth2_service(self, credentials: Credentials) -> GoogleOAuth2Client:
        return GoogleOAuth2Client(self.config, credentials)

    def get_document_service(self) -> DocumentService:
        """Document service for the logged-in user"""
        return DocumentService(self.config, self.get_drive_service(self.require_credential()))
