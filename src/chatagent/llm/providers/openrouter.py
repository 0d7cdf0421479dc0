from typing import Any

from ..models import ModelInfo
from .openai_compatible import OpenAICompatibleProvider, _as_price

APP_REFERER = "https://github.com/chatagent/chatagent"
APP_TITLE = "chatagent"


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter provider implementation.

    Hidden design decisions:
    - OpenRouter attribution headers (HTTP-Referer, X-Title)
    - Model list shape: ``data[].pricing.prompt`` as a decimal string
    - Temperature range 0.0 to 2.0
    """

    default_base_url = "https://openrouter.ai/api/v1"
    max_temperature = 2.0

    @property
    def id(self) -> str:
        return "openrouter"

    @property
    def name(self) -> str:
        return "OpenRouter"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["HTTP-Referer"] = APP_REFERER
        headers["X-Title"] = APP_TITLE
        return headers

    def _model_info(self, item: dict[str, Any]) -> ModelInfo:
        pricing = item.get("pricing") if isinstance(item.get("pricing"), dict) else {}
        return ModelInfo(
            id=item["id"],
            name=item.get("name") or item["id"],
            context_window=item.get("context_length") or 4096,
            price=_as_price(pricing.get("prompt")),
        )
