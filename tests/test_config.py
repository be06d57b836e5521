"""
Tests for configuration
"""
from godrive.utils.config import Config, load_config, _replace_env_vars


class TestConfig:
    """Test configuration loading and management"""

    def test_replace_env_vars(self, monkeypatch):
        """Test environment variable replacement"""
        monkeypatch.setenv("TEST_VAR", "test_value")

        obj = {
            "key1": "${TEST_VAR}",
            "key2": "normal_value",
            "nested": {
                "key3": "${TEST_VAR}"
            }
        }

        result = _replace_env_vars(obj)
        assert result["key1"] == "test_value"
        assert result["key2"] == "normal_value"
        assert result["nested"]["key3"] == "test_value"

    def test_replace_env_vars_list(self, monkeypatch):
        """Test environment variable replacement in lists"""
        monkeypatch.setenv("TEST_VAR", "test_value")

        obj = ["${TEST_VAR}", "normal", {"key": "${TEST_VAR}"}]
        result = _replace_env_vars(obj)

        assert result[0] == "test_value"
        assert result[1] == "normal"
        assert result[2]["key"] == "test_value"

    def test_unset_placeholder_is_dropped(self, monkeypatch):
        """Unset placeholders fall back to the model default"""
        monkeypatch.delenv("GOOGLE_APP_ID", raising=False)

        result = _replace_env_vars({"app_id": "${GOOGLE_APP_ID}", "callback_path": "/"})
        assert result == {"callback_path": "/"}
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))

        assert config.app.name == "SGF Editor"
        assert config.app.default_mimetype == "application/x-go-sgf"
        assert config.google.refresh_threshold_minutes == 5
        assert "https://www.googleapis.com/auth/drive.file" in config.google.scopes

    def test_load_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOOGLE_APP_ID", "123456789")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "app:\n"
            "  name: Kifu\n"
            "  board_size: 13\n"
            "google:\n"
            "  app_id: ${GOOGLE_APP_ID}\n"
            "  callback_path: /oauth2callback\n"
            "security:\n"
            "  session_ttl_days: 1\n"
        )

        config = load_config(str(config_file))

        assert config.app.name == "Kifu"
        assert config.app.board_size == 13
        assert config.google.app_id == "123456789"
        assert config.google.callback_path == "/oauth2callback"
        assert config.security.session_ttl_days == 1
        assert config.security.session_cookie_name == "godrive_session"

    def test_empty_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_config(str(config_file)) == Config()

