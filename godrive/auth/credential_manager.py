"""
Credential Manager

Acquires OAuth2 credentials through the web-server flow, stores them per
Google user (Fernet-encrypted) and hands them back refreshed.

    manager = CredentialManager.from_config(config)
    url, state = manager.get_authorization_url(redirect_uri, state)
    credentials = manager.retrieve(code, redirect_uri)
    manager.save(db, profile['id'], credentials, profile)
    credentials = manager.get(db, profile['id'])
"""
import os
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple, cast

from cryptography.fernet import InvalidToken
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from requests.exceptions import RequestException
from sqlalchemy.orm import Session

from ..core.exceptions import AuthenticationExpiredError, BaseCoreException
from ..database.models import OAuthState, StoredCredential, User
from ..utils import decrypt_token, encrypt_token, generate_state_token
from ..utils.config import Config, ConfigDefaults
from ..utils.logger import setup_logger
from .audit import AuditEventType, log_auth_event
from .client_secrets import ClientSecrets, load_client_secrets
from .oauth import SCOPES, build_flow
from .token_refresh import needs_refresh, refresh_with_retry

logger = setup_logger(__name__)

# Google returns the granted scopes, which may include previously granted ones
os.environ.setdefault('OAUTHLIB_RELAX_TOKEN_SCOPE', '1')


class CodeExchangeError(BaseCoreException):
    """Raised when an authorization code cannot be exchanged for tokens"""
    pass


class CredentialManager:
    """OAuth2 credential acquisition, storage and refresh"""

    def __init__(
        self,
        client_secrets: ClientSecrets,
        scopes: Optional[List[str]] = None,
        refresh_threshold_minutes: int = ConfigDefaults.REFRESH_THRESHOLD_MINUTES,
        max_retries: int = ConfigDefaults.REFRESH_MAX_RETRIES,
        backoff_factor: float = ConfigDefaults.REFRESH_BACKOFF_FACTOR,
        state_ttl_minutes: int = ConfigDefaults.OAUTH_STATE_TTL_MINUTES,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client_secrets = client_secrets
        self.scopes = scopes or SCOPES
        self.refresh_threshold_minutes = refresh_threshold_minutes
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.state_ttl_minutes = state_ttl_minutes
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Config) -> 'CredentialManager':
        """
        Raises:
            ClientSecretsError: If the client secrets cannot be loaded
        """
        google = config.google
        return cls(
            load_client_secrets(google.client_secrets_path),
            scopes=google.scopes,
            refresh_threshold_minutes=google.refresh_threshold_minutes,
            max_retries=google.refresh_max_retries,
            backoff_factor=google.refresh_backoff_factor,
            state_ttl_minutes=google.oauth_state_ttl_minutes
        )

    # ------------------------------------------------------------------
    # Authorization flow
    # ------------------------------------------------------------------

    def get_authorization_url(self, redirect_uri: str, state: Optional[str] = None) -> Tuple[str, str]:
        """
        Generate the consent URL

        Returns:
            (authorization_url, state) tuple
        """
        state = state or generate_state_token()
        flow = build_flow(self.client_secrets, redirect_uri, self.scopes)

        authorization_url, _ = flow.authorization_url(
            access_type='offline',
            include_granted_scopes='true',
            state=state,
            prompt='consent'  # Get refresh token
        )

        logger.info(f"Generated authorization URL with state: {state[:10]}...")
        return authorization_url, state

    def retrieve(self, code: str, redirect_uri: str) -> Credentials:
        """
        Exchange an authorization code for credentials

        Raises:
            CodeExchangeError: If Google rejects the code or cannot be reached
        """
        flow = build_flow(self.client_secrets, redirect_uri, self.scopes)
        try:
            flow.fetch_token(code=code)
        except (OAuth2Error, RequestException) as e:
            logger.warning(f"Authorization code exchange failed: {e}")
            raise CodeExchangeError(str(e)) from e

        credentials = flow.credentials
        logger.info(
            "Token exchange complete",
            has_refresh_token=bool(credentials.refresh_token),
            expiry=str(credentials.expiry)
        )
        if not credentials.refresh_token:
            logger.warning("No refresh token received from Google")
        return credentials

    def create_state(self, db: Session, session_token: str, file_id: Optional[str] = None) -> str:
        """
        Store a new OAuth state for a browser session

        Args:
            session_token: Token hash of the session starting the login
            file_id: File to return to after login
        """
        now = datetime.utcnow()
        db.query(OAuthState).filter(OAuthState.expires_at < now).delete(synchronize_session=False)

        state = generate_state_token()
        db.add(OAuthState(
            state=state,
            session_token=session_token,
            file_id=file_id,
            expires_at=now + timedelta(minutes=self.state_ttl_minutes)
        ))
        db.commit()
        return state

    def consume_state(self, db: Session, state: Optional[str], session_token: Optional[str]) -> Optional[OAuthState]:
        """
        Validate and mark an OAuth state as used

        The state must have been created for the same browser session.

        Returns:
            The state record, or None if unknown, used, expired or
            issued to another session
        """
        if not state or not session_token:
            return None

        record = db.query(OAuthState).filter(
            OAuthState.state == state,
            OAuthState.session_token == session_token,
            OAuthState.used == False,  # noqa: E712
            OAuthState.expires_at > datetime.utcnow()
        ).first()
        if record is None:
            logger.warning(f"Rejected OAuth state: {state[:10]}...")
            return None

        record.used = True
        db.commit()
        return record

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def save(
        self,
        db: Session,
        user_id: str,
        credentials: Credentials,
        profile: Optional[Dict[str, Any]] = None
    ) -> StoredCredential:
        """
        Store credentials for a Google user, replacing any previous ones

        A refresh token is only sent on first consent; when the new
        credentials lack one the stored refresh token is kept.
        """
        user = db.query(User).filter(User.google_id == user_id).first()
        if user is None:
            user = User(google_id=user_id)
            db.add(user)
        if profile:
            user.email = profile.get('email', user.email)
            user.name = profile.get('name', user.name)
            user.picture_url = profile.get('picture', user.picture_url)
        user.last_login_at = datetime.utcnow()

        stored = db.query(StoredCredential).filter(StoredCredential.user_id == user_id).first()
        if stored is None:
            stored = StoredCredential(user_id=user_id)
            db.add(stored)

        stored.access_token = cast(str, encrypt_token(credentials.token))
        if credentials.refresh_token:
            stored.refresh_token = encrypt_token(credentials.refresh_token)
        stored.token_expiry = credentials.expiry.replace(tzinfo=None) if credentials.expiry else None
        stored.scopes = ' '.join(credentials.scopes or self.scopes)

        db.commit()
        db.refresh(stored)
        logger.info(f"Saved credentials for user {user_id}")
        return stored

    def get(self, db: Session, user_id: Optional[str]) -> Optional[Credentials]:
        """
        Load credentials for a Google user, refreshing them if needed

        Returns:
            Usable credentials, or None if there are none or they can no
            longer be refreshed (in which case they are deleted)
        """
        if not user_id:
            return None

        stored = db.query(StoredCredential).filter(StoredCredential.user_id == user_id).first()
        if stored is None:
            return None

        try:
            credentials = self._to_credentials(stored)
        except (InvalidToken, ValueError, TypeError) as e:
            logger.error(f"Failed to decrypt tokens for user {user_id}: {e}")
            return None

        if not needs_refresh(credentials, self.refresh_threshold_minutes):
            return credentials

        try:
            refresh_with_retry(credentials, self.max_retries, self.backoff_factor, sleep=self._sleep)
        except AuthenticationExpiredError as e:
            log_auth_event(
                db,
                AuditEventType.TOKEN_REFRESH_FAILURE,
                user_id=user_id,
                success=False,
                error_message=str(e)
            )
            self.delete(db, user_id)
            return None
        except (RefreshError, TransportError, ConnectionError) as e:
            log_auth_event(
                db,
                AuditEventType.TOKEN_REFRESH_FAILURE,
                user_id=user_id,
                success=False,
                error_message=str(e),
                attempts=self.max_retries
            )
            if credentials.token and not credentials.expired:
                logger.info("Using existing credentials despite refresh failure (token still valid)")
                return credentials
            return None

        stored.access_token = cast(str, encrypt_token(credentials.token))
        if credentials.refresh_token:
            stored.refresh_token = encrypt_token(credentials.refresh_token)
        if credentials.expiry:
            stored.token_expiry = credentials.expiry.replace(tzinfo=None)
        db.commit()

        log_auth_event(db, AuditEventType.TOKEN_REFRESH_SUCCESS, user_id=user_id)
        return credentials

    def delete(self, db: Session, user_id: Optional[str]) -> bool:
        """
        Permanently delete the stored credentials of a Google user

        Returns:
            True if credentials were deleted
        """
        if not user_id:
            return False

        stored = db.query(StoredCredential).filter(StoredCredential.user_id == user_id).first()
        if stored is None:
            return False

        db.delete(stored)
        db.commit()
        logger.info(f"Deleted credentials for user {user_id}")
        return True

    def _to_credentials(self, stored: StoredCredential) -> Credentials:
        credentials = Credentials(
            token=decrypt_token(stored.access_token),
            refresh_token=decrypt_token(stored.refresh_token) if stored.refresh_token else None,
            token_uri=self.client_secrets.token_uri,
            client_id=self.client_secrets.client_id,
            client_secret=self.client_secrets.client_secret,
            scopes=stored.scope_list() or self.scopes
        )
        if stored.token_expiry:
            credentials.expiry = stored.token_expiry
        return credentials
