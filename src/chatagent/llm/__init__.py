from .base import ChatProvider, ChunkCallback
from .factory import PROVIDER_CLASSES, create_provider
from .manager import ProviderManager, ProviderState, create_default_manager
from .models import ChatMessage, ConfigField, FieldOption, FieldType, MessageRole, ModelInfo, SendOptions
from .providers import GuijiProvider, OpenAICompatibleProvider, OpenRouterProvider
from .stream import EventStreamDecoder, delta_content, iter_content, resolve_encoding

__all__ = [
    "ChatProvider",
    "ChunkCallback",
    "PROVIDER_CLASSES",
    "create_provider",
    "ProviderManager",
    "ProviderState",
    "create_default_manager",
    "ChatMessage",
    "ConfigField",
    "FieldOption",
    "FieldType",
    "MessageRole",
    "ModelInfo",
    "SendOptions",
    "GuijiProvider",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "EventStreamDecoder",
    "delta_content",
    "iter_content",
    "resolve_encoding",
]
