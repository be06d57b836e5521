"""
Pytest configuration for auth tests
"""
from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest
from google.oauth2.credentials import Credentials

from godrive.auth import ClientSecrets, CredentialManager


@pytest.fixture
def client_secrets():
    return ClientSecrets(
        client_id="test-client.apps.googleusercontent.com",
        client_secret="test-client-secret"
    )


@pytest.fixture
def sleep():
    """Replaces time.sleep between refresh attempts"""
    return Mock()


@pytest.fixture
def credential_manager(client_secrets, sleep):
    return CredentialManager(client_secrets, sleep=sleep)


@pytest.fixture
def make_credentials(client_secrets):
    """Build credentials expiring `expires_in` from now (naive UTC, as google-auth expects)"""
    def _make(token="ya29.access", refresh_token="1//refresh", expires_in=timedelta(hours=1)):
        return Credentials(
            token=token,
            refresh_token=refresh_token,
            token_uri=client_secrets.token_uri,
            client_id=client_secrets.client_id,
            client_secret=client_secrets.client_secret,
            expiry=datetime.utcnow() + expires_in if expires_in is not None else None
        )
    return _make
