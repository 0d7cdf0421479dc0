from typing import Any

from ..models import ConfigField, FieldOption, FieldType, ModelInfo
from .openai_compatible import OpenAICompatibleProvider


class GuijiProvider(OpenAICompatibleProvider):
    """Guiji (SiliconFlow) provider implementation.

    Hidden design decisions:
    - Model list under ``models`` (falls back to the OpenAI ``data`` key)
    - Temperature range 0.0 to 1.0
    - Optional service region selection
    """

    default_base_url = "https://api.guiji.ai/v1"
    max_temperature = 1.0

    @property
    def id(self) -> str:
        return "guiji"

    @property
    def name(self) -> str:
        return "Guiji"

    def get_config_form(self) -> list[ConfigField]:
        return [
            *self._base_config_form(),
            ConfigField(
                key="region",
                label="Region",
                type=FieldType.SELECT,
                required=False,
                options=[
                    FieldOption(value="cn", label="China"),
                    FieldOption(value="global", label="Global"),
                ],
                description="Service region",
            ),
        ]

    def _normalize_models(self, payload: Any) -> list[ModelInfo]:
        if not isinstance(payload, dict):
            return []
        items = payload.get("models")
        if items is None:
            items = payload.get("data")
        return [self._model_info(item) for item in items or [] if isinstance(item, dict) and item.get("id")]
