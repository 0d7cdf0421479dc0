from .guiji import GuijiProvider
from .openai_compatible import OpenAICompatibleProvider
from .openrouter import OpenRouterProvider

__all__ = ["GuijiProvider", "OpenAICompatibleProvider", "OpenRouterProvider"]
