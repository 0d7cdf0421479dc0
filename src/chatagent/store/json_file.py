"""JSON file key/value store backend.

Keeps every key in one JSON document on disk, loaded on connect and
rewritten atomically (temp file + rename) on each change.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Single-file JSON store, persistent across sessions."""

    def __init__(self, path: str | Path = "./ai-chat-agent-config.json"):
        super().__init__()
        self._path = Path(path)
        self._data: dict[str, Any] = {}

    @property
    def path(self) -> Path:
        return self._path

    async def connect(self) -> None:
        """Load the document from disk, starting empty if it does not exist."""
        self._data = await asyncio.to_thread(self._read)
        logger.debug(f"Loaded store from {self._path} ({len(self._data)} keys)")

    async def disconnect(self) -> None:
        """Nothing to release; every change is already on disk."""
        pass

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self._path} does not contain a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        await asyncio.to_thread(self._write, copy.deepcopy(self._data))

    async def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            await asyncio.to_thread(self._write, copy.deepcopy(self._data))

    @property
    def backend_type(self) -> str:
        return "json"
