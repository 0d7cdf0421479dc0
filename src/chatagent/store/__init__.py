"""Key/value persistence for settings and chat history."""

from .base import KeyValueStore
from .factory import create_store
from .in_memory import InMemoryStore
from .json_file import JsonFileStore
from .sqlite import SQLiteStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "SQLiteStore",
    "create_store",
]
