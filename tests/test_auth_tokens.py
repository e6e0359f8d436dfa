"""Tests for JWT token creation and bearer header handling."""
import pytest
import time
from datetime import timedelta
from jose import jwt, JWTError

from umrah_feedback.api.deps import create_access_token, decode_subject, require_bearer_token
from umrah_feedback.config import settings
from umrah_feedback.exceptions import AuthorizationMissingError, UnauthorizedError


class TestJWTTokens:
    """Test JWT access token behavior."""

    def test_access_token_decode(self):
        """Access token should be decodable with correct secret."""
        token = create_access_token(data={"sub": "42", "email": "user@test.com"})
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert payload["sub"] == "42"
        assert payload["email"] == "user@test.com"
        assert "exp" in payload

    def test_access_token_expiry(self):
        """Should expire after ACCESS_TOKEN_EXPIRE_MINUTES (120 min = 7200 sec)."""
        token = create_access_token(data={"sub": "1"})
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert 7000 < (payload["exp"] - time.time()) < 7300

    def test_access_token_custom_expiry(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(minutes=30))
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        assert 1700 < (payload["exp"] - time.time()) < 1900

    def test_wrong_secret_fails(self):
        token = create_access_token(data={"sub": "1"})
        with pytest.raises(JWTError):
            jwt.decode(token, "wrong-secret-key", algorithms=["HS256"])


class TestDecodeSubject:
    """Subject extraction for per-user endpoints."""

    def test_returns_sub_and_email(self):
        token = create_access_token(data={"sub": "pilgrim-7", "email": "p7@example.com"})
        assert decode_subject(token) == ("pilgrim-7", "p7@example.com")

    def test_expired_token(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(UnauthorizedError):
            decode_subject(token)

    def test_missing_sub(self):
        token = create_access_token(data={"email": "nobody@example.com"})
        with pytest.raises(UnauthorizedError):
            decode_subject(token)

    def test_garbage(self):
        with pytest.raises(UnauthorizedError):
            decode_subject("not.a.token")


class TestRequireBearerToken:
    """Presence check used by the analysis function."""

    def test_valid_header(self):
        assert require_bearer_token("Bearer abc123") == "abc123"

    def test_scheme_case_insensitive(self):
        assert require_bearer_token("bearer abc123") == "abc123"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc123", "abc123"])
    def test_rejected(self, header):
        with pytest.raises(AuthorizationMissingError) as exc_info:
            require_bearer_token(header)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Missing authorization header"
