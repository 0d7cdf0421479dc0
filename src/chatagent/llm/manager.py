"""Registry of chat providers with a single active provider.

Each provider id moves through Unregistered -> Registered -> Configured ->
Active. At most one provider is Active at a time. Activation lives in
memory only and is re-derived from persisted settings at startup.
"""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from ..errors import ConfigurationError, ProviderError
from .base import ChatProvider, ChunkCallback
from .factory import PROVIDER_CLASSES
from .models import ChatMessage, ConfigField, ModelInfo, SendOptions

logger = logging.getLogger(__name__)


class ProviderState(str, Enum):
    """Lifecycle state of a provider id inside the manager."""

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    CONFIGURED = "configured"
    ACTIVE = "active"


class ProviderManager:
    """Maps provider ids to instances and dispatches sends to the active one."""

    def __init__(self) -> None:
        self._providers: dict[str, ChatProvider] = {}
        self._configured: set[str] = set()
        self._active_id: str | None = None

    def register(self, provider: ChatProvider) -> None:
        """Add a provider to the registry, replacing any with the same id.

        Raises:
            ConfigurationError: If the provider id or name is blank
        """
        if not (provider.id or "").strip() or not (provider.name or "").strip():
            raise ConfigurationError(
                "Provider id and name must not be blank",
                details={"field": "id" if not (provider.id or "").strip() else "name"},
            )
        self._providers[provider.id] = provider
        self._configured.discard(provider.id)
        if self._active_id == provider.id:
            self._active_id = None
        logger.info(f"Registered provider {provider.id}")

    def get_providers(self) -> list[dict[str, str]]:
        """List registered providers as ``{id, name}`` entries."""
        return [{"id": p.id, "name": p.name} for p in self._providers.values()]

    def get_state(self, provider_id: str) -> ProviderState:
        if provider_id not in self._providers:
            return ProviderState.UNREGISTERED
        if provider_id == self._active_id:
            return ProviderState.ACTIVE
        if provider_id in self._configured:
            return ProviderState.CONFIGURED
        return ProviderState.REGISTERED

    def _get(self, provider_id: str) -> ChatProvider:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise ProviderError(f"Provider {provider_id} not found", details={"provider": provider_id})
        return provider

    def get_provider_config_form(self, provider_id: str) -> list[ConfigField]:
        return self._get(provider_id).get_config_form()

    async def get_provider_models(self, provider_id: str) -> list[ModelInfo]:
        return await self._get(provider_id).get_available_models()

    async def set_provider_config(self, provider_id: str, config: Mapping[str, str]) -> ChatProvider:
        """Validate ``config`` on a fresh instance and store it on success.

        On failure the registry entry and the active provider are left
        untouched and the validation error propagates.

        Returns:
            The validated provider instance
        """
        current = self._get(provider_id)
        candidate = current.with_config(config)
        await candidate.validate_config()

        self._providers[provider_id] = candidate
        self._configured.add(provider_id)
        logger.info(f"Configured provider {provider_id}")
        return candidate

    def set_active_provider(self, provider_id: str) -> None:
        """Make a configured provider the single active one.

        Raises:
            ProviderError: If the provider is unknown or not configured
        """
        self._get(provider_id)
        if provider_id not in self._configured:
            raise ProviderError(f"Provider {provider_id} not configured", details={"provider": provider_id})
        if self._active_id and self._active_id != provider_id:
            logger.info(f"Provider {self._active_id} is no longer active")
        self._active_id = provider_id
        logger.info(f"Active provider is now {provider_id}")

    def get_active_provider(self) -> ChatProvider:
        if self._active_id is None:
            raise ProviderError("No active provider set")
        return self._providers[self._active_id]

    async def send_message(
        self,
        messages: Sequence[ChatMessage | Mapping[str, str]],
        options: SendOptions,
        on_chunk: ChunkCallback,
    ) -> None:
        """Stream a reply from the active provider."""
        await self.get_active_provider().send_message_stream(messages, options, on_chunk)


def create_default_manager(**client_kwargs: Any) -> ProviderManager:
    """Create a manager with every built-in provider registered, none configured.

    Args:
        **client_kwargs: HTTP client kwargs carried by every provider instance
    """
    manager = ProviderManager()
    for provider_cls in PROVIDER_CLASSES.values():
        manager.register(provider_cls(None, **client_kwargs))
    return manager
