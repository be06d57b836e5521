"""
Token Refresh

Refreshes expired or soon-to-expire OAuth access tokens with exponential
backoff. Persistence of the refreshed token is left to the caller
(CredentialManager.get).
"""
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from ..core.exceptions import AuthenticationExpiredError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


def is_invalid_grant(error: Exception) -> bool:
    """True when Google rejected the refresh token itself (revoked or expired)"""
    return 'invalid_grant' in str(error)


def needs_refresh(credentials: Credentials, refresh_threshold_minutes: int = 5) -> bool:
    """
    Check whether credentials are expired or expire within the threshold

    Credentials without an expiry are only refreshed when they carry no
    access token at all.
    """
    if not credentials.token:
        return True
    if credentials.expiry is None:
        return False
    if credentials.expired:
        return True
    time_until_expiry = credentials.expiry - datetime.utcnow()
    return time_until_expiry < timedelta(minutes=refresh_threshold_minutes)


def refresh_with_retry(
    credentials: Credentials,
    max_retries: int = 3,
    backoff_factor: float = 2.0,
    sleep: Callable[[float], None] = time.sleep
) -> Credentials:
    """
    Refresh credentials in place, retrying transient failures

    Waits backoff_factor ** attempt seconds between attempts.

    Args:
        credentials: Credentials with a refresh token
        max_retries: Maximum number of attempts
        backoff_factor: Base of the exponential backoff
        sleep: Used to wait between attempts

    Returns:
        The same credentials object, refreshed

    Raises:
        AuthenticationExpiredError: No refresh token, or Google answered invalid_grant
        TransportError / RefreshError: Still failing after max_retries attempts
    """
    if not credentials.refresh_token:
        raise AuthenticationExpiredError("Credentials have no refresh token")

    last_error: Optional[Exception] = None
    for attempt in range(max(max_retries, 1)):
        try:
            credentials.refresh(Request())
            logger.info(f"Successfully refreshed token (attempt {attempt + 1})")
            return credentials
        except RefreshError as e:
            if is_invalid_grant(e):
                logger.warning(f"Refresh token rejected by Google: {e}")
                raise AuthenticationExpiredError(str(e)) from e
            last_error = e
        except (TransportError, ConnectionError) as e:
            last_error = e

        wait_time = backoff_factor ** attempt
        if attempt < max_retries - 1:
            logger.warning(
                f"Token refresh failed (attempt {attempt + 1}/{max_retries}): "
                f"{type(last_error).__name__}: {last_error}. Retrying in {wait_time}s..."
            )
            sleep(wait_time)

    logger.error(f"Token refresh failed after {max_retries} attempts: {last_error}")
    raise last_error
