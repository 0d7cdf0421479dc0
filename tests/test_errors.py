"""Unit tests for the error taxonomy."""
import httpx
import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from chatagent.errors import (
    SUGGESTIONS,
    APIError,
    AuthenticationError,
    ChatAgentError,
    ConfigurationError,
    ErrorCode,
    ModelError,
    NetworkError,
    UnknownError,
    classify,
    friendly_message,
)
from chatagent.llm import ChatMessage


def _status_error(status: int, body: bytes = b"") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.test/v1/models")
    response = httpx.Response(status, content=body, request=request)
    return httpx.HTTPStatusError(f"status {status}", request=request, response=response)


class TestClassify:
    """Tests for classify()."""

    def test_domain_error_passes_through(self):
        error = ModelError("bad")
        assert classify(error) is error

    def test_connect_error_is_network(self):
        request = httpx.Request("GET", "https://example.test")
        result = classify(httpx.ConnectError("connection refused", request=request), "OpenRouter")
        assert isinstance(result, NetworkError)
        assert result.code == ErrorCode.NETWORK

    def test_timeout_is_network(self):
        request = httpx.Request("GET", "https://example.test")
        result = classify(httpx.ReadTimeout("timed out", request=request), "OpenRouter")
        assert isinstance(result, NetworkError)
        assert "timed out" in result.message

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, status: int):
        result = classify(_status_error(status), "OpenRouter")
        assert isinstance(result, AuthenticationError)
        assert "OpenRouter" in result.message
        assert "API key" in result.message

    def test_rate_limit(self):
        result = classify(_status_error(429), "OpenRouter")
        assert isinstance(result, APIError)
        assert "retry later" in result.message

    def test_other_status_includes_code_and_reason(self):
        result = classify(_status_error(503), "OpenRouter")
        assert isinstance(result, APIError)
        assert "503" in result.message
        assert "Service Unavailable" in result.message

    def test_error_body_message_becomes_details(self):
        result = classify(_status_error(400, b'{"error": {"message": "model not found"}}'))
        assert result.details == "model not found"

    def test_plain_text_body_becomes_details(self):
        result = classify(_status_error(500, b"upstream exploded"))
        assert result.details == "upstream exploded"

    def test_validation_error_is_model(self):
        with pytest.raises(ValidationError) as exc_info:
            ChatMessage(role="robot", content="hi")
        assert isinstance(classify(exc_info.value), ModelError)

    def test_unrecognized_is_unknown_with_cause(self):
        cause = RuntimeError("boom")
        result = classify(cause)
        assert isinstance(result, UnknownError)
        assert result.code == ErrorCode.UNKNOWN
        assert result.cause is cause


class TestChatAgentError:
    """Tests for the base error type."""

    def test_to_dict(self):
        error = ConfigurationError("missing key", details={"field": "apiKey"})
        data = error.to_dict()
        assert data["name"] == "ConfigurationError"
        assert data["code"] == "CONFIGURATION_ERROR"
        assert data["details"] == {"field": "apiKey"}
        assert "timestamp" in data

    def test_every_code_has_a_suggestion(self):
        assert set(SUGGESTIONS) == set(ErrorCode)


class TestFriendlyMessage:
    """Tests for friendly_message()."""

    def test_includes_message_details_and_suggestion(self):
        text = friendly_message(ConfigurationError("missing key", details="apiKey"))
        assert text.startswith("missing key")
        assert "Details: apiKey" in text
        assert SUGGESTIONS[ErrorCode.CONFIGURATION] in text

    def test_without_details(self):
        text = friendly_message(NetworkError("offline"))
        assert "Details" not in text
        assert SUGGESTIONS[ErrorCode.NETWORK] in text

    def test_raw_exception_is_classified(self):
        text = friendly_message(ValueError("weird"))
        assert text.startswith("Unknown error")

    @given(st.text(), st.one_of(st.none(), st.text(), st.dictionaries(st.text(), st.integers())))
    def test_never_raises(self, message: str, details):
        """Property test: any message/details combination renders."""
        assert isinstance(friendly_message(ChatAgentError(message, details)), str)

    def test_never_raises_on_broken_details(self):
        class Unprintable:
            def __str__(self):
                raise RuntimeError("no")

            def __bool__(self):
                return True

        assert isinstance(friendly_message(APIError("x", details=Unprintable())), str)
