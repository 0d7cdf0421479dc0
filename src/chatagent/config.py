"""Configuration constants and environment-driven application config.

Centralizes magic numbers and defaults used across the providers,
the store backends and the chat facade.
"""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns INFO if invalid."""
        return cls._from_string.get(level_str.strip().lower(), cls.INFO)


# Request defaults
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000
REQUEST_TIMEOUT = 60.0  # Seconds, applied to connect/read/write

# Number of trailing messages sent as conversation context
CONTEXT_WINDOW_MESSAGES = 10

# Chat defaults
DEFAULT_CHAT_TITLE = "New Chat"
DEFAULT_PROVIDER = "openrouter"

# Store keys
SETTINGS_KEY = "settings"
CHATS_KEY = "chats"

# Store defaults
DEFAULT_STORE_BACKEND = "json"
DEFAULT_STORE_PATH = Path.home() / ".chatagent" / "ai-chat-agent-config.json"


class AppConfig(BaseModel):
    """Process-level configuration, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    store_backend: str = Field(default=DEFAULT_STORE_BACKEND, description="memory, json or sqlite")
    store_path: Path = Field(default=DEFAULT_STORE_PATH, description="File used by json/sqlite backends")
    log_level: str = Field(default="info")


def load_app_config() -> AppConfig:
    """Build the application config from environment variables.

    Environment variables:
        CHATAGENT_STORE_BACKEND: Store backend (default: json)
        CHATAGENT_STORE_PATH: Store file path (default: ~/.chatagent/ai-chat-agent-config.json)
        CHATAGENT_LOG_LEVEL: Log level name (default: info)
    """
    return AppConfig(
        store_backend=os.getenv("CHATAGENT_STORE_BACKEND", DEFAULT_STORE_BACKEND).lower(),
        store_path=Path(os.getenv("CHATAGENT_STORE_PATH", str(DEFAULT_STORE_PATH))).expanduser(),
        log_level=os.getenv("CHATAGENT_LOG_LEVEL", "info"),
    )


def configure_logging(level: str = "info") -> None:
    """Install a basic stderr handler for the chatagent logger hierarchy."""
    root = logging.getLogger("chatagent")
    root.setLevel(LogLevel.from_string(level))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%H:%M:%S")
        )
        root.addHandler(handler)
