import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from ...config import REQUEST_TIMEOUT
from ...errors import APIError, ModelError, classify
from ..base import ChatProvider
from ..models import ChatMessage, ConfigField, FieldType, ModelInfo, SendOptions
from ..stream import delta_content, iter_content, resolve_encoding

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(ChatProvider):
    """Shared implementation for backends speaking the OpenAI REST dialect.

    Hidden design decisions:
    - HTTP client setup and bearer authentication
    - ``/chat/completions`` request body and SSE response decoding
    - Message and option validation before any request is made
    - Reclassification of httpx failures into the error taxonomy

    Subclasses set the endpoint, the temperature bound and how the
    ``/models`` response is normalized.
    """

    default_base_url: str = ""
    max_temperature: float = 2.0

    def _base_config_form(self) -> list[ConfigField]:
        return [
            ConfigField(
                key="apiKey",
                label="API Key",
                type=FieldType.PASSWORD,
                required=True,
                description=f"API key issued by {self.name}",
            ),
            ConfigField(
                key="baseUrl",
                label="API Endpoint",
                type=FieldType.TEXT,
                required=False,
                description=f"Override the default endpoint ({self.default_base_url})",
            ),
        ]

    def get_config_form(self) -> list[ConfigField]:
        return self._base_config_form()

    @property
    def base_url(self) -> str:
        return (self._config.get("baseUrl") or self.default_base_url).rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.get('apiKey', '')}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        """Create a client for one exchange; each call gets its own."""
        kwargs: dict[str, Any] = {"timeout": REQUEST_TIMEOUT, **self._client_kwargs}
        return httpx.AsyncClient(base_url=self.base_url, headers=self._headers(), **kwargs)

    def _normalize_models(self, payload: Any) -> list[ModelInfo]:
        """Convert the ``/models`` response body to ModelInfo entries."""
        items = payload.get("data") if isinstance(payload, dict) else None
        return [self._model_info(item) for item in items or [] if isinstance(item, dict) and item.get("id")]

    def _model_info(self, item: dict[str, Any]) -> ModelInfo:
        return ModelInfo(
            id=item["id"],
            name=item.get("name") or item["id"],
            context_window=item.get("context_length") or 4096,
            price=_as_price(item.get("price")),
        )

    async def validate_config(self) -> None:
        self.check_required_fields()
        models = await self.get_available_models()
        if not models:
            raise APIError(f"{self.name} returned no models for this configuration")

    async def get_available_models(self) -> list[ModelInfo]:
        self.check_required_fields()
        try:
            async with self._client() as client:
                response = await client.get("/models")
                response.raise_for_status()
                payload = response.json()
            models = self._normalize_models(payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to list {self.name} models: {e}")
            raise classify(e, self.name) from e
        except ValueError as e:
            raise APIError(f"{self.name} returned an unreadable model list", details=str(e)) from e

        logger.debug(f"Fetched {len(models)} models from {self.name}")
        return models

    def _check_request(
        self,
        messages: Sequence[ChatMessage | Mapping[str, str]],
        options: SendOptions,
    ) -> list[dict[str, str]]:
        """Validate messages and options; return the wire-format messages."""
        if not messages:
            raise ModelError("At least one message is required")
        try:
            wire = [
                (msg if isinstance(msg, ChatMessage) else ChatMessage.model_validate(msg)).to_wire()
                for msg in messages
            ]
        except ValidationError as e:
            raise ModelError("Invalid message in conversation", details=str(e)) from e

        if not options.model.strip():
            raise ModelError("No model selected")
        if not 0 <= options.temperature <= self.max_temperature:
            raise ModelError(
                f"temperature must be between 0 and {self.max_temperature:g} for {self.name}",
                details={"temperature": options.temperature},
            )
        if options.max_tokens <= 0:
            raise ModelError("max_tokens must be positive", details={"max_tokens": options.max_tokens})
        return wire

    def _request_body(self, messages: list[dict[str, str]], options: SendOptions) -> dict[str, Any]:
        return {
            "model": options.model,
            "messages": messages,
            "stream": True,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }

    def extract_content(self, payload: Any) -> str | None:
        """Pull the incremental token out of one parsed stream record."""
        return delta_content(payload)

    def stream_message(
        self,
        messages: Sequence[ChatMessage | Mapping[str, str]],
        options: SendOptions,
    ) -> AsyncIterator[str]:
        self.check_required_fields()
        wire_messages = self._check_request(messages, options)
        return self._stream_generator(self._request_body(wire_messages, options))

    async def _stream_generator(self, body: dict[str, Any]) -> AsyncIterator[str]:
        """Internal generator that opens the stream and yields fragments."""
        try:
            async with self._client() as client:
                async with client.stream("POST", "/chat/completions", json=body) as response:
                    if not response.is_success:
                        await response.aread()
                        response.raise_for_status()

                    async for fragment in iter_content(
                        response.aiter_bytes(),
                        extract=self.extract_content,
                        encoding=resolve_encoding(response.charset_encoding),
                    ):
                        yield fragment
        except httpx.HTTPError as e:
            logger.error(f"{self.name} streaming request failed: {e}")
            raise classify(e, self.name) from e


def _as_price(value: Any) -> float:
    """Parse a price that may arrive as a number or a decimal string."""
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if price >= 0 else 0.0
