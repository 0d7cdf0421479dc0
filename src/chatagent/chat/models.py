"""Data models for chats and settings.

These models define the persisted shape of chat history and settings,
independent of the store backend used. Field names are stored in
camelCase (``createdAt``, ``providerConfig``) and accepted in either form.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_CHAT_TITLE, DEFAULT_PROVIDER
from ..llm.models import ChatMessage


def generate_id() -> str:
    return uuid4().hex


class Message(ChatMessage):
    """A message stored in a chat transcript."""

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(default_factory=generate_id)
    timestamp: datetime | None = Field(default_factory=datetime.now)


class Chat(BaseModel):
    """A conversation and its ordered messages."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    title: str = Field(default=DEFAULT_CHAT_TITLE)
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def recent_messages(self, limit: int) -> list[Message]:
        """Return the trailing ``limit`` messages, oldest first."""
        return self.messages[-limit:] if limit > 0 else []

    def to_store(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Settings(BaseModel):
    """Application settings: which provider to use and how."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: str = Field(default=DEFAULT_PROVIDER, description="Registered provider id")
    provider_config: dict[str, str] = Field(default_factory=dict)
    selected_model: str | None = Field(default=None)

    def to_store(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
