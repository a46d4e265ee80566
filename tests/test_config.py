"""
Tests for configuration, exceptions, auth helpers and metrics.
"""

import time
from uuid import uuid4

import pytest
from jose import jwt

from tabletalk.config import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.app_env == "development"
        assert settings.is_production is False
        assert settings.supabase.enabled is False
        assert settings.reasoning.provider == "gemini"
        assert settings.sampling.analysis_sample_rows == 10
        assert settings.sampling.answer_sample_rows == 20

    def test_nested_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("REASONING_PROVIDER", "http")
        monkeypatch.setenv("REASONING_URL", "https://fn.test/assistant")
        monkeypatch.setenv("SAMPLING_ANSWER_SAMPLE_ROWS", "5")
        monkeypatch.setenv("SUPABASE_ENABLED", "true")

        settings = Settings()

        assert settings.reasoning.provider == "http"
        assert settings.reasoning.url == "https://fn.test/assistant"
        assert settings.sampling.answer_sample_rows == 5
        assert settings.supabase.enabled is True

    def test_production_flag(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")

        assert Settings().is_production is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestReasoningClientSelection:
    def test_http_provider(self, monkeypatch):
        from tabletalk.core.reasoning_client import HttpReasoningClient
        from tabletalk.deps import get_reasoning_client

        monkeypatch.setenv("REASONING_PROVIDER", "http")
        client = get_reasoning_client(Settings())

        assert isinstance(client, HttpReasoningClient)

    def test_gemini_provider(self, monkeypatch):
        from tabletalk.core.gemini import GeminiReasoningClient
        from tabletalk.deps import get_reasoning_client

        monkeypatch.setenv("GEMINI_MODEL", "gemini-test")
        client = get_reasoning_client(Settings())

        assert isinstance(client, GeminiReasoningClient)
        assert client.model == "gemini-test"


class TestExceptions:
    def test_unauthenticated(self):
        from tabletalk.exceptions import UnauthenticatedError

        exc = UnauthenticatedError()
        assert exc.status_code == 401
        assert exc.code == "UNAUTHENTICATED"

    def test_transport_error_default_message(self):
        from tabletalk.exceptions import TransportError

        exc = TransportError(status=503)
        assert exc.message == "Failed to call AI function"
        assert exc.status_code == 502
        assert exc.details == {"service": "reasoning", "upstream_status": 503}

    def test_not_found(self):
        from tabletalk.exceptions import NotFoundException

        exc = NotFoundException("dataset", "sales_123")
        assert exc.status_code == 404
        assert "dataset" in exc.message

    def test_conversation_state_errors(self):
        from tabletalk.exceptions import ConversationBusyError, ConversationNotOpenError

        assert ConversationNotOpenError("f").status_code == 409
        assert ConversationBusyError(uuid4()).code == "CONVERSATION_BUSY"


class TestVerifyJwt:
    SECRET = "test-secret"

    def test_valid_token(self):
        from tabletalk.auth import verify_jwt

        user_id = uuid4()
        token = jwt.encode(
            {"sub": str(user_id), "email": "ana@example.com", "exp": int(time.time()) + 60},
            self.SECRET,
            algorithm="HS256",
        )

        payload = verify_jwt(token, self.SECRET)

        assert payload.sub == user_id
        assert payload.email == "ana@example.com"
        assert payload.role == "authenticated"

    def test_wrong_secret(self):
        from tabletalk.auth import verify_jwt
        from tabletalk.exceptions import UnauthenticatedError

        token = jwt.encode({"sub": str(uuid4())}, "other", algorithm="HS256")

        with pytest.raises(UnauthenticatedError):
            verify_jwt(token, self.SECRET)

    def test_expired(self):
        from tabletalk.auth import verify_jwt
        from tabletalk.exceptions import UnauthenticatedError

        token = jwt.encode({"sub": str(uuid4()), "exp": int(time.time()) - 60}, self.SECRET, algorithm="HS256")

        with pytest.raises(UnauthenticatedError):
            verify_jwt(token, self.SECRET)

    def test_missing_subject(self):
        from tabletalk.auth import verify_jwt
        from tabletalk.exceptions import UnauthenticatedError

        token = jwt.encode({"email": "x@example.com"}, self.SECRET, algorithm="HS256")

        with pytest.raises(UnauthenticatedError):
            verify_jwt(token, self.SECRET)


class TestSessionProvider:
    def test_static_provider(self):
        from tabletalk.auth import StaticSessionProvider

        assert StaticSessionProvider("  abc ").get_current_session_token() == "abc"
        assert StaticSessionProvider("   ").get_current_session_token() is None
        assert StaticSessionProvider(None).get_current_session_token() is None
