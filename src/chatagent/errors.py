"""Error taxonomy shared by providers, the provider manager and the facades.

Low-level failures (httpx transport errors, HTTP status errors, pydantic
validation errors) are reclassified into these kinds at the provider
boundary, so callers only ever handle ``ChatAgentError`` subclasses.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    CONFIGURATION = "CONFIGURATION_ERROR"
    API = "API_ERROR"
    NETWORK = "NETWORK_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    MODEL = "MODEL_ERROR"
    PROVIDER = "PROVIDER_ERROR"
    CHAT_NOT_FOUND = "CHAT_NOT_FOUND"
    UNKNOWN = "UNKNOWN_ERROR"


class ChatAgentError(Exception):
    """Base exception for chatagent."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        self.timestamp = datetime.now()
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(ChatAgentError):
    """Missing or invalid provider/application configuration."""

    code = ErrorCode.CONFIGURATION


class APIError(ChatAgentError):
    """The remote API answered with a failure status."""

    code = ErrorCode.API


class NetworkError(ChatAgentError):
    """Connection, DNS or timeout failure."""

    code = ErrorCode.NETWORK


class AuthenticationError(ChatAgentError):
    """Credentials were rejected by the remote API."""

    code = ErrorCode.AUTHENTICATION


class ModelError(ChatAgentError):
    """Invalid messages or request options for the model."""

    code = ErrorCode.MODEL


class ProviderError(ChatAgentError):
    """Provider registry misuse: unknown, unconfigured or inactive provider."""

    code = ErrorCode.PROVIDER


class ChatNotFoundError(ChatAgentError):
    """A chat id does not exist in the store."""

    code = ErrorCode.CHAT_NOT_FOUND


class UnknownError(ChatAgentError):
    """Wraps a failure that matched no other kind."""

    code = ErrorCode.UNKNOWN

    def __init__(self, message: str, details: Any = None, cause: BaseException | None = None):
        super().__init__(message, details)
        self.cause = cause


SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.NETWORK: "Check that your network connection is working.",
    ErrorCode.AUTHENTICATION: "Check that your API key is correct.",
    ErrorCode.CONFIGURATION: "Check that the provider settings are complete and correct.",
    ErrorCode.API: "If the problem persists, contact the service provider.",
    ErrorCode.MODEL: "Try another model or shorten the conversation.",
    ErrorCode.PROVIDER: "Try configuring or switching to another provider.",
    ErrorCode.CHAT_NOT_FOUND: "Reload the chat list; the chat may have been deleted.",
    ErrorCode.UNKNOWN: "Try again; if the problem persists, restart the application.",
}


def _error_body_message(response: httpx.Response) -> str | None:
    """Extract ``error.message`` from an error body, or the raw body text."""
    try:
        body = response.text
    except httpx.ResponseNotRead:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return body.strip()[:500] or None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return None


def classify(error: BaseException, provider_name: str = "") -> ChatAgentError:
    """Map a raw failure to the error taxonomy.

    Args:
        error: Exception raised by the transport, the HTTP layer or validation
        provider_name: Human-readable provider label used in messages

    Returns:
        A ChatAgentError subclass instance (the input itself if already one)
    """
    if isinstance(error, ChatAgentError):
        return error

    label = provider_name or "Provider"

    if isinstance(error, httpx.TimeoutException):
        return NetworkError(
            f"Request to {label} timed out; check your network connection",
            details=str(error) or None,
        )

    if isinstance(error, httpx.TransportError):
        return NetworkError(
            f"Could not connect to {label}; check your network connection",
            details=str(error) or None,
        )

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        status = response.status_code
        body_message = _error_body_message(response)
        if status in (401, 403):
            return AuthenticationError(
                f"{label} authentication failed; check that the API key is correct",
                details=body_message,
            )
        if status == 429:
            return APIError(
                "Too many requests; please retry later",
                details=body_message,
            )
        return APIError(
            f"API request failed ({status}): {response.reason_phrase}",
            details=body_message,
        )

    if isinstance(error, ValidationError):
        return ModelError("Invalid message or request options", details=str(error))

    return UnknownError("Unknown error", details=repr(error), cause=error)


def friendly_message(error: BaseException) -> str:
    """Render a user-facing message: base message, details and a suggestion.

    Never raises; anything that is not a ChatAgentError is classified first.
    """
    try:
        domain_error = classify(error)
        text = domain_error.message
        if domain_error.details:
            text += f"\nDetails: {domain_error.details}"
        suggestion = SUGGESTIONS.get(domain_error.code)
        if suggestion:
            text += f"\nSuggestion: {suggestion}"
        return text
    except Exception:
        logger.exception("Failed to render error message")
        return "An unexpected error occurred."
