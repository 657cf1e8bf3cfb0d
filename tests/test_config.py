"""Tests for configuration validation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from fileuploader.core.config import INSECURE_DEFAULT_JWT_SECRET, Settings


@pytest.fixture
def clean_env(monkeypatch):
    """Remove the suite-wide secret so defaults can be observed."""
    for name in ("JWT_SECRET_KEY", "JWT_SECRET", "JWT_EXPIRATION_HOURS", "SESSION_LIFETIME_HOURS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_defaults(self, clean_env):
        config = Settings(_env_file=None)
        assert config.jwt_algorithm == "HS256"
        assert config.session_lifetime == timedelta(hours=24)
        assert config.password_min_length == 6
        assert config.max_upload_size == 8 * 1024 * 1024

    def test_missing_secret_falls_back_with_warning(self, clean_env):
        config = Settings(_env_file=None)
        assert config.jwt_secret_key is None
        assert config.effective_jwt_secret_key == INSECURE_DEFAULT_JWT_SECRET

        warnings = config.check_security_configuration()
        assert any("JWT_SECRET_KEY is not set" in w for w in warnings)


class TestSecretValidation:
    def test_strong_secret_no_warning(self, clean_env):
        config = Settings(_env_file=None, jwt_secret_key="k" * 64)
        assert config.effective_jwt_secret_key == "k" * 64
        assert config.check_security_configuration() == []

    def test_short_secret_warns(self, clean_env):
        config = Settings(_env_file=None, jwt_secret_key="short")
        warnings = config.check_security_configuration()
        assert any("shorter than 32" in w for w in warnings)

    def test_legacy_env_names(self, clean_env):
        clean_env.setenv("JWT_SECRET", "s" * 40)
        clean_env.setenv("JWT_EXPIRATION_HOURS", "6")
        config = Settings(_env_file=None)
        assert config.jwt_secret_key == "s" * 40
        assert config.session_lifetime == timedelta(hours=6)

    def test_session_lifetime_must_be_positive(self, clean_env):
        clean_env.setenv("SESSION_LIFETIME_HOURS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestFieldValidation:
    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_asymmetric_algorithm_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_algorithm="RS256")

    def test_sqlite_detection(self):
        assert Settings(_env_file=None, database_url="sqlite+aiosqlite:///x.db").is_sqlite
        assert not Settings(
            _env_file=None, database_url="postgresql+asyncpg://u:p@localhost/db"
        ).is_sqlite
