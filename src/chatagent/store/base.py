"""Abstract base class for key/value store backends.

This module defines the persistence contract used for settings and chat
history. The abstraction hides:
- Storage format (JSON document, SQLite rows, in-memory dict)
- Persistence mechanism
- Connection management

Values are JSON-compatible data. Read-modify-write sequences go through
``update``, which holds a per-store lock so concurrent writers cannot
overwrite each other's changes.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

Updater = Callable[[Any], Any | Awaitable[Any]]


class KeyValueStore(ABC):
    """Abstract key/value store backend."""

    def __init__(self) -> None:
        self._write_lock = asyncio.Lock()

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def update(self, key: str, fn: Updater, default: Any = None) -> Any:
        """Read ``key``, transform it with ``fn`` and write the result back.

        The whole sequence runs under the store's single-writer lock.

        Args:
            key: Key to update
            fn: Receives the current value (or ``default``) and returns the
                new value; may be a coroutine function
            default: Value passed to ``fn`` when the key is absent

        Returns:
            The value written
        """
        async with self._write_lock:
            current = await self.get(key)
            new_value = fn(default if current is None else current)
            if asyncio.iscoroutine(new_value):
                new_value = await new_value
            await self.set(key, new_value)
            return new_value

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
