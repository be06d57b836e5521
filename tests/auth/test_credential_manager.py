"""
Tests for the credential manager: authorization flow, storage and refresh
"""
from datetime import datetime, timedelta
from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError

from godrive.auth import CodeExchangeError
from godrive.auth.audit import AuditEventType
from godrive.database.models import AuditLog, OAuthState, StoredCredential, User
from godrive.utils import decrypt_token

REDIRECT_URI = "http://localhost:8000/"
SESSION_HASH = "a" * 64


class TestAuthorizationFlow:
    """Test consent URL generation and code exchange"""

    def test_authorization_url(self, credential_manager):
        url, state = credential_manager.get_authorization_url(REDIRECT_URI, state="state-123")

        query = parse_qs(urlparse(url).query)
        assert state == "state-123"
        assert url.startswith("https://accounts.google.com/o/oauth2/auth")
        assert query["state"] == ["state-123"]
        assert query["access_type"] == ["offline"]
        assert query["prompt"] == ["consent"]
        assert query["redirect_uri"] == [REDIRECT_URI]
        assert query["client_id"] == ["test-client.apps.googleusercontent.com"]
        assert "https://www.googleapis.com/auth/drive.file" in query["scope"][0].split()

    def test_authorization_url_generates_state(self, credential_manager):
        _, state = credential_manager.get_authorization_url(REDIRECT_URI)
        assert len(state) > 20

    def test_retrieve(self, credential_manager, make_credentials):
        flow = Mock()
        flow.credentials = make_credentials()

        with patch('godrive.auth.credential_manager.build_flow', return_value=flow) as mock_build:
            credentials = credential_manager.retrieve("4/auth-code", REDIRECT_URI)

        assert credentials is flow.credentials
        flow.fetch_token.assert_called_once_with(code="4/auth-code")
        assert mock_build.call_args.args[1] == REDIRECT_URI

    def test_retrieve_rejected_code(self, credential_manager):
        flow = Mock()
        flow.fetch_token.side_effect = InvalidGrantError(description="Malformed auth code.")

        with patch('godrive.auth.credential_manager.build_flow', return_value=flow):
            with pytest.raises(CodeExchangeError):
                credential_manager.retrieve("bad-code", REDIRECT_URI)


class TestOAuthState:
    """Test the state parameter store"""

    def test_consume_once(self, db_session, credential_manager):
        state = credential_manager.create_state(db_session, SESSION_HASH, file_id="0B-file")

        record = credential_manager.consume_state(db_session, state, SESSION_HASH)
        assert record is not None
        assert record.file_id == "0B-file"

        assert credential_manager.consume_state(db_session, state, SESSION_HASH) is None

    def test_unknown_state(self, db_session, credential_manager):
        assert credential_manager.consume_state(db_session, "never-issued", SESSION_HASH) is None
        assert credential_manager.consume_state(db_session, None, SESSION_HASH) is None

    def test_state_of_another_session(self, db_session, credential_manager):
        state = credential_manager.create_state(db_session, SESSION_HASH)

        assert credential_manager.consume_state(db_session, state, "b" * 64) is None
        assert credential_manager.consume_state(db_session, state, None) is None
        # still usable by the session it was issued to
        assert credential_manager.consume_state(db_session, state, SESSION_HASH) is not None

    def test_expired_state(self, db_session, credential_manager):
        db_session.add(OAuthState(
            state="old",
            session_token=SESSION_HASH,
            expires_at=datetime.utcnow() - timedelta(minutes=1)
        ))
        db_session.commit()

        assert credential_manager.consume_state(db_session, "old", SESSION_HASH) is None

    def test_create_purges_expired(self, db_session, credential_manager):
        db_session.add(OAuthState(
            state="old",
            session_token=SESSION_HASH,
            expires_at=datetime.utcnow() - timedelta(minutes=1)
        ))
        db_session.commit()

        credential_manager.create_state(db_session, SESSION_HASH)

        assert db_session.query(OAuthState).filter(OAuthState.state == "old").count() == 0


class TestStorage:
    """Test credential persistence"""

    def test_save_encrypts_tokens(self, db_session, credential_manager, make_credentials):
        profile = {"id": "1089", "email": "player@example.com", "name": "Player", "picture": "https://p"}

        stored = credential_manager.save(db_session, "1089", make_credentials(), profile)

        assert stored.access_token != "ya29.access"
        assert decrypt_token(stored.access_token) == "ya29.access"
        assert decrypt_token(stored.refresh_token) == "1//refresh"
        assert stored.token_expiry is not None

        user = db_session.query(User).filter(User.google_id == "1089").one()
        assert user.email == "player@example.com"
        assert user.name == "Player"
        assert user.last_login_at is not None

    def test_save_keeps_refresh_token(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials())
        credential_manager.save(db_session, "1089", make_credentials(token="ya29.second", refresh_token=None))

        stored = db_session.query(StoredCredential).filter(StoredCredential.user_id == "1089").one()
        assert decrypt_token(stored.access_token) == "ya29.second"
        assert decrypt_token(stored.refresh_token) == "1//refresh"

    def test_get_roundtrip(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials())

        credentials = credential_manager.get(db_session, "1089")

        assert credentials.token == "ya29.access"
        assert credentials.refresh_token == "1//refresh"
        assert credentials.client_id == "test-client.apps.googleusercontent.com"
        assert "https://www.googleapis.com/auth/drive.file" in credentials.scopes

    def test_get_unknown_user(self, db_session, credential_manager):
        assert credential_manager.get(db_session, "nobody") is None
        assert credential_manager.get(db_session, None) is None

    def test_get_undecryptable(self, db_session, credential_manager, make_credentials):
        stored = credential_manager.save(db_session, "1089", make_credentials())
        stored.access_token = "not-a-fernet-token"
        db_session.commit()

        assert credential_manager.get(db_session, "1089") is None

    def test_delete(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials())

        assert credential_manager.delete(db_session, "1089") is True
        assert credential_manager.delete(db_session, "1089") is False
        assert credential_manager.get(db_session, "1089") is None


class TestRefreshOnGet:
    """Test refresh of expired credentials when they are loaded"""

    def test_expired_credentials_are_refreshed_and_saved(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials(expires_in=timedelta(minutes=-5)))

        def fake_refresh(self, request):
            self.token = "ya29.refreshed"
            self.expiry = datetime.utcnow() + timedelta(hours=1)

        with patch.object(Credentials, 'refresh', autospec=True, side_effect=fake_refresh):
            credentials = credential_manager.get(db_session, "1089")

        assert credentials.token == "ya29.refreshed"
        stored = db_session.query(StoredCredential).filter(StoredCredential.user_id == "1089").one()
        assert decrypt_token(stored.access_token) == "ya29.refreshed"
        assert stored.token_expiry > datetime.utcnow()
        assert db_session.query(AuditLog).filter(
            AuditLog.event_type == AuditEventType.TOKEN_REFRESH_SUCCESS
        ).count() == 1

    def test_valid_credentials_are_not_refreshed(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials())

        with patch.object(Credentials, 'refresh') as mock_refresh:
            credential_manager.get(db_session, "1089")

        mock_refresh.assert_not_called()

    def test_revoked_refresh_token_deletes_credentials(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials(expires_in=timedelta(minutes=-5)))

        with patch.object(Credentials, 'refresh') as mock_refresh:
            mock_refresh.side_effect = RefreshError("invalid_grant: Token has been expired or revoked.")
            assert credential_manager.get(db_session, "1089") is None

        assert db_session.query(StoredCredential).count() == 0
        failure = db_session.query(AuditLog).filter(
            AuditLog.event_type == AuditEventType.TOKEN_REFRESH_FAILURE
        ).one()
        assert failure.success is False

    def test_network_failure_keeps_valid_token(self, db_session, credential_manager, make_credentials, sleep):
        """Token inside the refresh threshold but not yet expired is still usable"""
        credential_manager.save(
            db_session, "1089", make_credentials(expires_in=timedelta(minutes=4, seconds=30))
        )

        with patch.object(Credentials, 'refresh') as mock_refresh:
            mock_refresh.side_effect = TransportError("Connection refused")
            credentials = credential_manager.get(db_session, "1089")

        assert credentials is not None
        assert credentials.token == "ya29.access"
        assert mock_refresh.call_count == 3
        assert sleep.call_count == 2
        assert db_session.query(StoredCredential).count() == 1

    def test_network_failure_with_expired_token(self, db_session, credential_manager, make_credentials):
        credential_manager.save(db_session, "1089", make_credentials(expires_in=timedelta(minutes=-5)))

        with patch.object(Credentials, 'refresh') as mock_refresh:
            mock_refresh.side_effect = TransportError("Connection refused")
            assert credential_manager.get(db_session, "1089") is None

        # transient failures do not delete the stored credentials
        assert db_session.query(StoredCredential).count() == 1
