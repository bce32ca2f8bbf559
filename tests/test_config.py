"""Tests for configuration management."""

import pytest
from pydantic import ValidationError


def create_test_settings(**kwargs):
    """Helper to create Settings instance without loading .env file."""
    from personal_notes.config import Settings

    # Disable .env file loading for tests
    return Settings(_env_file=None, **kwargs)


class TestSettingsDefaults:
    def test_defaults(self) -> None:
        settings = create_test_settings()

        assert settings.environment == "production"
        assert settings.log_level == "INFO"
        assert settings.api_host == "127.0.0.1"
        assert settings.api_port == 8080
        assert settings.db_path == "data/db.sqlite3"
        assert settings.settings_path == "settings.json"
        assert settings.repair_legacy_notes is False
        assert settings.no_browser is False
        assert settings.frontend_dir == "frontend"
        assert settings.audit_queue_size == 1000
        assert settings.allowed_origins == ["*"]

    def test_is_development(self) -> None:
        assert create_test_settings(environment="Development").is_development is True
        assert create_test_settings().is_development is False

    def test_log_file_path(self) -> None:
        settings = create_test_settings(log_directory="/var/log/notes", log_file_prefix="app")
        assert settings.log_file_path == "/var/log/notes/app.log"


class TestSettingsFromEnv:
    """Tests for Settings initialization from environment variables."""

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PORT", "9090")
        monkeypatch.setenv("DB_PATH", "/tmp/notes.db")
        monkeypatch.setenv("SETTINGS_PATH", "/tmp/settings.json")
        monkeypatch.setenv("NO_BROWSER", "true")
        monkeypatch.setenv("FRONTEND_DIR", "/srv/notes-ui")
        monkeypatch.setenv("REPAIR_LEGACY_NOTES", "1")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = create_test_settings()

        assert settings.api_port == 9090
        assert settings.db_path == "/tmp/notes.db"
        assert settings.settings_path == "/tmp/settings.json"
        assert settings.no_browser is True
        assert settings.frontend_dir == "/srv/notes-ui"
        assert settings.repair_legacy_notes is True
        assert settings.log_level == "DEBUG"

    def test_allowed_origins_parsing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000, http://127.0.0.1:3000,")

        settings = create_test_settings()

        assert settings.allowed_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]

    def test_allowed_origins_empty_disables_cors(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOWED_ORIGINS", "")

        assert create_test_settings().allowed_origins == []

    def test_get_settings_is_cached(self) -> None:
        from personal_notes.config import get_settings

        assert get_settings() is get_settings()


class TestSettingsValidation:
    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            create_test_settings(log_level="LOUD")

    @pytest.mark.parametrize("port", [0, 70000])
    def test_invalid_port(self, port: int) -> None:
        with pytest.raises(ValidationError, match="api_port"):
            create_test_settings(api_port=port)

    def test_invalid_audit_queue_size(self) -> None:
        with pytest.raises(ValidationError, match="audit_queue_size"):
            create_test_settings(audit_queue_size=0)
