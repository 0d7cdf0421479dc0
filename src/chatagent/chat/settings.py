"""Settings facade over the key/value store."""

import logging
from collections.abc import Mapping
from typing import Any

from ..config import SETTINGS_KEY
from ..errors import ChatAgentError, ConfigurationError
from ..llm.factory import PROVIDER_CLASSES
from ..llm.manager import ProviderManager, ProviderState
from ..llm.models import SendOptions
from ..store.base import KeyValueStore
from .models import Settings

logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and writes the persisted ``settings`` document."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def get_settings(self) -> Settings:
        """Return stored settings, or defaults when none were saved yet."""
        return Settings.model_validate(await self._store.get(SETTINGS_KEY) or {})

    async def update_settings(self, **updates: Any) -> Settings:
        """Merge ``updates`` (snake_case field names) into stored settings.

        Raises:
            ConfigurationError: If ``provider`` names no built-in provider
        """
        provider_id = updates.get("provider")
        if provider_id is not None and provider_id not in PROVIDER_CLASSES:
            raise ConfigurationError(
                f"Unknown provider: {provider_id}",
                details={"field": "provider", "allowed": sorted(PROVIDER_CLASSES)},
            )

        def apply(current: dict) -> dict:
            merged = {**Settings.model_validate(current).model_dump(), **updates}
            return Settings.model_validate(merged).to_store()

        return Settings.model_validate(await self._store.update(SETTINGS_KEY, apply, default={}))

    async def send_options(self) -> SendOptions:
        """Build request options from the selected model.

        Raises:
            ConfigurationError: If no model has been selected
        """
        settings = await self.get_settings()
        if not settings.selected_model:
            raise ConfigurationError("No model selected", details={"field": "selectedModel"})
        return SendOptions(model=settings.selected_model)

    async def configure_provider(
        self,
        manager: ProviderManager,
        provider_id: str,
        config: Mapping[str, str],
        selected_model: str | None = None,
    ) -> Settings:
        """Validate and activate a provider, then persist the choice.

        Nothing is persisted if validation fails.
        """
        await manager.set_provider_config(provider_id, config)
        manager.set_active_provider(provider_id)

        updates: dict[str, Any] = {"provider": provider_id, "provider_config": dict(config)}
        if selected_model:
            updates["selected_model"] = selected_model
        return await self.update_settings(**updates)

    async def restore(self, manager: ProviderManager) -> bool:
        """Re-derive the active provider from persisted settings.

        Returns:
            True if the stored provider was validated and activated
        """
        settings = await self.get_settings()
        if manager.get_state(settings.provider) == ProviderState.UNREGISTERED:
            logger.warning(f"Stored provider {settings.provider} is not registered")
            return False
        if not settings.provider_config:
            logger.info(f"Provider {settings.provider} has no stored configuration")
            return False

        try:
            await manager.set_provider_config(settings.provider, settings.provider_config)
            manager.set_active_provider(settings.provider)
        except ChatAgentError as e:
            logger.warning(f"Could not restore provider {settings.provider}: {e.message}")
            return False
        return True
