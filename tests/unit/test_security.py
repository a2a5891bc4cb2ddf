"""
Unit tests for passwords, tokens, configuration checks and error helpers
"""

import pytest
from datetime import timedelta
from core.config import DEFAULT_SECRET_KEY, Settings, settings, validate_config
from core.exceptions import AuthenticationError, ConfigurationError, TableServiceError, is_duplicate_error
from core.security import (
    create_access_token,
    create_reset_token,
    decode_access_token,
    decode_reset_token,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    @pytest.mark.parametrize("stored", [None, "", "plain-text-password"])
    def test_missing_or_malformed_hash(self, stored):
        assert verify_password("secret123", stored) is False


class TestTokens:
    """Test session and reset tokens"""

    def test_access_token_round_trip(self):
        token = create_access_token("recCust1", "ama@example.com", "customer", name="Ama")
        payload = decode_access_token(token)
        assert payload["sub"] == "recCust1"
        assert payload["role"] == "customer"
        assert payload["name"] == "Ama"

    def test_reset_token_is_not_a_session(self):
        token = create_reset_token("ama@example.com")
        assert decode_reset_token(token) == "ama@example.com"
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_session_token_cannot_reset_password(self):
        token = create_access_token("recCust1", "ama@example.com", "customer")
        with pytest.raises(AuthenticationError):
            decode_reset_token(token)

    def test_expired_token(self):
        token = create_access_token("recCust1", "ama@example.com", "customer", expires_delta=timedelta(minutes=-5))
        with pytest.raises(AuthenticationError, match="Invalid or expired token"):
            decode_access_token(token)

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.token")


class TestConfiguration:

    def test_all_required_values_missing(self):
        config = Settings(
            _env_file=None,
            AIRTABLE_API_KEY="",
            AIRTABLE_BASE_ID="",
            CLOUDINARY_CLOUD_NAME="",
            CLOUDINARY_UPLOAD_PRESET="",
        )
        is_valid, missing = validate_config(config)
        assert is_valid is False
        assert missing == [
            "AIRTABLE_API_KEY",
            "AIRTABLE_BASE_ID",
            "CLOUDINARY_CLOUD_NAME",
            "CLOUDINARY_UPLOAD_PRESET",
        ]

    def test_configured(self, test_settings):
        assert validate_config(test_settings) == (True, [])
        assert test_settings.airtable_configured
        assert not test_settings.emailjs_configured
        assert test_settings.APP_BASE_URL == "https://tracker.test"

    def test_default_secret_key_rejected_outside_development(self, test_settings):
        config = test_settings.model_copy(update={"ENVIRONMENT": "production"})
        assert validate_config(config) == (False, ["SECRET_KEY"])

        config = test_settings.model_copy(update={"ENVIRONMENT": "production", "SECRET_KEY": "s3cret-for-prod"})
        assert validate_config(config) == (True, [])

    def test_default_secret_key_cannot_sign_outside_development(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "SECRET_KEY", DEFAULT_SECRET_KEY)

        with pytest.raises(ConfigurationError):
            create_access_token("recAdmin", "admin@example.com", "admin")
        with pytest.raises(ConfigurationError):
            decode_access_token("not.a.token")


class TestErrors:

    @pytest.mark.parametrize("message,expected", [
        ("Duplicate value for field email", True),
        ("UNIQUE constraint failed", True),
        ("Invalid permissions", False),
    ])
    def test_is_duplicate_error(self, message, expected):
        assert is_duplicate_error(Exception(message)) is expected

    def test_duplicate_check_ignores_context(self):
        error = TableServiceError(
            "Table service error on Users: Invalid permissions",
            context={"table": "Users", "response_body": "{\"field\": \"uniqueCode\"}"},
        )
        assert "unique" in str(error).lower()
        assert is_duplicate_error(error) is False
        assert is_duplicate_error(TableServiceError("Table service error on Users: Duplicate email")) is True

    def test_error_string_carries_context(self):
        error = TableServiceError("Table service error on Items", context={"table": "Items", "status_code": 500})
        text = str(error)
        assert text.startswith("TableServiceError: Table service error on Items")
        assert "table=Items" in text
        assert error.to_dict()["context"]["status_code"] == 500
