"""In-memory key/value store backend.

Simple dict-based storage for session-only data.
Data is lost when the application exits.
"""

import copy
from typing import Any

from .base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """In-memory store (session-only).

    Values are deep-copied on the way in and out, so callers never share
    mutable state with the store. Suitable for testing.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        super().__init__()
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def backend_type(self) -> str:
        return "memory"
