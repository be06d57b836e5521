"""
Pytest configuration for API tests
"""
from datetime import datetime, timedelta
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient
from google.oauth2.credentials import Credentials

from api.dependencies import get_config, get_credential_manager
from api.main import app
from godrive.auth import ClientSecrets, CredentialManager, create_session, set_session_user
from godrive.utils.config import Config

USER_ID = "108912345678901234567"
PROFILE = {"id": USER_ID, "email": "player@example.com", "name": "Go Player", "picture": "https://lh3/p.jpg"}
DRIVE_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/drive.file",
]


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def credential_manager():
    secrets = ClientSecrets(
        client_id="test-client.apps.googleusercontent.com",
        client_secret="test-client-secret"
    )
    return CredentialManager(secrets, sleep=Mock())


@pytest.fixture
def client(config, credential_manager):
    """Test client with the OAuth client secrets and config replaced"""
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_credential_manager] = lambda: credential_manager
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_credentials():
    def _make(token="ya29.access"):
        return Credentials(
            token=token,
            refresh_token="1//refresh",
            token_uri="https://oauth2.googleapis.com/token",
            client_id="test-client.apps.googleusercontent.com",
            client_secret="test-client-secret",
            scopes=DRIVE_SCOPES,
            expiry=datetime.utcnow() + timedelta(hours=1)
        )
    return _make


@pytest.fixture
def logged_in(client, db_session, credential_manager, make_credentials):
    """Store credentials for USER_ID and attach a logged-in session cookie to the client"""
    credential_manager.save(db_session, USER_ID, make_credentials(), PROFILE)
    raw_token, web_session = create_session(db_session)
    set_session_user(db_session, web_session, USER_ID)
    client.cookies.set("godrive_session", raw_token)
    return client


@pytest.fixture
def drive():
    """Mocked Drive client returned for every request"""
    drive = Mock()
    with patch('api.base.GoogleDriveClient', return_value=drive):
        yield drive


@pytest.fixture
def oauth2_service():
    service = Mock()
    service.userinfo.return_value = dict(PROFILE)
    with patch('api.base.GoogleOAuth2Client', return_value=service):
        yield service
