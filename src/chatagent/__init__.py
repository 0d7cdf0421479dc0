"""chatagent: provider-agnostic chat client core with streamed replies."""

from .chat import Chat, ChatService, Message, Settings, SettingsService
from .context import AppContext, create_app_context
from .errors import (
    APIError,
    AuthenticationError,
    ChatAgentError,
    ChatNotFoundError,
    ConfigurationError,
    ErrorCode,
    ModelError,
    NetworkError,
    ProviderError,
    UnknownError,
    classify,
    friendly_message,
)
from .llm import ChatProvider, ProviderManager, SendOptions, create_provider

__all__ = [
    "AppContext",
    "create_app_context",
    "Chat",
    "ChatService",
    "Message",
    "Settings",
    "SettingsService",
    "APIError",
    "AuthenticationError",
    "ChatAgentError",
    "ChatNotFoundError",
    "ConfigurationError",
    "ErrorCode",
    "ModelError",
    "NetworkError",
    "ProviderError",
    "UnknownError",
    "classify",
    "friendly_message",
    "ChatProvider",
    "ProviderManager",
    "SendOptions",
    "create_provider",
]
