"""Tests for settings validation."""

from dataclasses import replace

import pytest

from authcore.config import get_settings


class TestValidateRuntime:
    """Tests for the startup guard."""

    def test_defaults_start(self):
        """Development settings with default cost pass."""
        replace(get_settings(), APP_ENV="development", BCRYPT_ROUNDS=10).validate_runtime()

    def test_low_bcrypt_cost_refused(self):
        """A cost below 10 stops startup instead of failing every hash later."""
        with pytest.raises(RuntimeError, match="BCRYPT_ROUNDS"):
            replace(get_settings(), BCRYPT_ROUNDS=9).validate_runtime()

    def test_production_requires_secret(self):
        """Production without JWT_SECRET_KEY is refused."""
        with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
            replace(get_settings(), APP_ENV="production", JWT_SECRET_KEY="", BCRYPT_ROUNDS=10).validate_runtime()

    def test_production_with_secret_starts(self):
        replace(get_settings(), APP_ENV="production", JWT_SECRET_KEY="s3cret", BCRYPT_ROUNDS=10).validate_runtime()


class TestValidate:
    """Tests for startup warnings."""

    def test_missing_secret_warns(self):
        warnings = replace(get_settings(), JWT_SECRET_KEY="", SMTP_HOST="").validate()
        assert any("JWT_SECRET_KEY" in w for w in warnings)
        assert any("SMTP_HOST" in w for w in warnings)

    def test_complete_settings_have_no_warnings(self):
        assert replace(get_settings(), JWT_SECRET_KEY="s3cret", SMTP_HOST="smtp.example.com").validate() == []
