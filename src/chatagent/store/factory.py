"""Factory for creating key/value store backends."""

from typing import Any

from .base import KeyValueStore


def create_store(
    backend: str = "memory",
    **kwargs: Any
) -> KeyValueStore:
    """Create a key/value store backend.

    Args:
        backend: Backend type ("memory", "json" or "sqlite")
        **kwargs: Backend-specific configuration (e.g. ``path``)

    Returns:
        KeyValueStore instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryStore
        return InMemoryStore(**kwargs)

    elif backend == "json":
        from .json_file import JsonFileStore
        return JsonFileStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteStore
        return SQLiteStore(**kwargs)

    raise ValueError(
        f"Unsupported store backend: {backend}. "
        f"Supported backends: memory, json, sqlite"
    )
