from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE


class MessageRole(str, Enum):
    """Role of a message sender."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: MessageRole = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")

    def to_wire(self) -> dict[str, str]:
        """Return the ``{role, content}`` form sent to chat-completion APIs."""
        return {"role": self.role, "content": self.content}


class ModelInfo(BaseModel):
    """A model offered by a provider, normalized across backends."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Model identifier sent in requests")
    name: str = Field(description="Human-readable model name")
    context_window: int = Field(default=4096, gt=0, description="Context length in tokens")
    price: float = Field(default=0.0, ge=0, description="Prompt price per token")


class FieldType(str, Enum):
    """Input type of a provider configuration field."""

    TEXT = "text"
    PASSWORD = "password"
    SELECT = "select"


class FieldOption(BaseModel):
    """One choice of a select-type configuration field."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class ConfigField(BaseModel):
    """Declarative description of one provider configuration field."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Key in the provider config mapping")
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: list[FieldOption] | None = None
    description: str | None = None


class SendOptions(BaseModel):
    """Per-request options for a streamed chat completion.

    Bounds are checked by the provider, since the valid temperature range
    differs between backends.
    """

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Model identifier")
    temperature: float = Field(default=DEFAULT_TEMPERATURE)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS)
