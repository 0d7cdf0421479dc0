import contextlib
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from typing import Any

from ..errors import ConfigurationError
from .models import ChatMessage, ConfigField, FieldType, ModelInfo, SendOptions

ChunkCallback = Callable[[str], Any]


class ChatProvider(ABC):
    """Abstract base class for chat-completion providers.

    This module hides the design decision of which backend serves a chat.
    Implementations must handle provider-specific details like:
    - Endpoint and authentication headers
    - Request/response format conversion
    - Model list normalization
    - Reclassifying transport errors into the chatagent error taxonomy

    Instances are immutable once constructed; a configuration change always
    goes through ``with_config`` and yields a new instance.
    """

    def __init__(self, config: Mapping[str, str] | None = None, **client_kwargs: Any):
        """Initialize provider.

        Args:
            config: Values for the fields described by ``get_config_form``
            **client_kwargs: Additional kwargs for the underlying HTTP client
        """
        self._config: dict[str, str] = dict(config or {})
        self._client_kwargs = client_kwargs

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable unique key, used as registry key and persisted in settings."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable label."""

    @property
    def config(self) -> dict[str, str]:
        """Copy of the configuration this instance was built with."""
        return dict(self._config)

    def with_config(self, config: Mapping[str, str]) -> "ChatProvider":
        """Return a fresh instance of the same provider with ``config``."""
        return type(self)(config, **self._client_kwargs)

    @abstractmethod
    def get_config_form(self) -> list[ConfigField]:
        """Describe the configuration fields this provider understands."""

    def check_required_fields(self) -> None:
        """Check the config against the form, without any I/O.

        Raises:
            ConfigurationError: If a required field is empty or a select
                field holds a value outside its options
        """
        for field in self.get_config_form():
            value = (self._config.get(field.key) or "").strip()
            if field.required and not value:
                raise ConfigurationError(
                    f"{self.name} requires '{field.label}' to be set",
                    details={"field": field.key},
                )
            if value and field.type == FieldType.SELECT and field.options:
                allowed = {option.value for option in field.options}
                if value not in allowed:
                    raise ConfigurationError(
                        f"Invalid value for '{field.label}': {value}",
                        details={"field": field.key, "allowed": sorted(allowed)},
                    )

    @abstractmethod
    async def validate_config(self) -> None:
        """Check required fields, then verify the configuration live.

        Raises:
            ConfigurationError: If required fields are missing
            APIError, NetworkError, AuthenticationError: If the live check fails
        """

    @abstractmethod
    async def get_available_models(self) -> list[ModelInfo]:
        """Fetch the models this provider offers.

        Raises:
            NetworkError, APIError, AuthenticationError
        """

    @abstractmethod
    def stream_message(
        self,
        messages: Sequence[ChatMessage | Mapping[str, str]],
        options: SendOptions,
    ) -> AsyncIterator[str]:
        """Stream a chat completion as content fragments.

        Args:
            messages: Conversation history, oldest first
            options: Model and sampling options

        Returns:
            Async iterator of non-empty content fragments in arrival order

        Raises:
            ModelError, NetworkError, APIError, AuthenticationError
        """

    async def send_message_stream(
        self,
        messages: Sequence[ChatMessage | Mapping[str, str]],
        options: SendOptions,
        on_chunk: ChunkCallback,
    ) -> None:
        """Stream a chat completion, invoking ``on_chunk`` per fragment.

        Returns only after the stream reaches its terminal record or the
        connection closes; no callback fires after that. The stream is closed
        even when ``on_chunk`` raises.
        """
        async with contextlib.aclosing(self.stream_message(messages, options)) as stream:
            async for fragment in stream:
                on_chunk(fragment)
