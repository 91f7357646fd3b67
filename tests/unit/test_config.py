"""
Unit tests for settings validation.
"""

import pytest
from pydantic import ValidationError

from staly.config import Settings


class TestSettings:
    """Tests for Settings validators."""

    def test_defaults(self):
        settings = Settings(_env_file=None, storage_backend="database", remote_sign_in_url="")

        assert settings.min_password_length == 4
        assert settings.database_url.startswith("sqlite+aiosqlite://")

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, storage_backend="firestore")

    def test_memory_backend_rejected_in_production(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", storage_backend="memory")

    def test_plain_http_remote_rejected_in_production(self):
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                environment="production",
                storage_backend="database",
                remote_sign_in_url="http://auth.internal/apple",
            )

    def test_https_remote_allowed_in_production(self):
        settings = Settings(
            _env_file=None,
            environment="production",
            storage_backend="database",
            remote_sign_in_url="https://auth.example.com/apple",
        )

        assert settings.remote_sign_in_url.startswith("https://")
