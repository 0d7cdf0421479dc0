"""Application wiring: one explicitly constructed context per process."""

import logging
from dataclasses import dataclass
from typing import Any

from .chat import ChatService, SettingsService
from .config import AppConfig, load_app_config
from .llm import ProviderManager, create_default_manager
from .store import KeyValueStore, create_store

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a UI shell needs, built once at startup."""

    config: AppConfig
    store: KeyValueStore
    manager: ProviderManager
    settings: SettingsService
    chats: ChatService

    async def close(self) -> None:
        await self.store.disconnect()


async def create_app_context(
    config: AppConfig | None = None,
    store: KeyValueStore | None = None,
    **client_kwargs: Any,
) -> AppContext:
    """Connect the store, register providers and restore the active provider.

    Args:
        config: Application config (default: read from environment)
        store: Pre-built store, overriding ``config.store_backend``
        **client_kwargs: HTTP client kwargs carried by every provider

    Returns:
        A ready AppContext; call ``close()`` on shutdown
    """
    config = config or load_app_config()
    if store is None:
        store_kwargs: dict[str, Any] = {}
        if config.store_backend != "memory":
            store_kwargs["path"] = config.store_path
        store = create_store(config.store_backend, **store_kwargs)
    await store.connect()

    manager = create_default_manager(**client_kwargs)
    settings = SettingsService(store)
    chats = ChatService(store, manager, settings)

    if await settings.restore(manager):
        logger.info(f"Restored active provider {manager.get_active_provider().id}")

    return AppContext(config=config, store=store, manager=manager, settings=settings, chats=chats)
