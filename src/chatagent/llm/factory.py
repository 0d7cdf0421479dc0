from collections.abc import Mapping
from typing import Any

from ..errors import ProviderError
from .base import ChatProvider
from .providers import GuijiProvider, OpenRouterProvider

# Closed set of built-in providers, keyed by provider id
PROVIDER_CLASSES: dict[str, type[ChatProvider]] = {
    "openrouter": OpenRouterProvider,
    "guiji": GuijiProvider,
}


def create_provider(
    provider: str,
    config: Mapping[str, str] | None = None,
    **client_kwargs: Any,
) -> ChatProvider:
    """Create a chat provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider id ('openrouter', 'guiji')
        config: Provider configuration
            For OpenRouter:
                - apiKey: str (required)
                - baseUrl: str (default: 'https://openrouter.ai/api/v1')
            For Guiji:
                - apiKey: str (required)
                - baseUrl: str (default: 'https://api.guiji.ai/v1')
                - region: 'cn' | 'global'
        **client_kwargs: Additional kwargs for the HTTP client

    Returns:
        Provider instance (not yet validated)

    Raises:
        ProviderError: If provider id is not supported

    Examples:
        >>> provider = create_provider("openrouter", {"apiKey": "sk-or-..."})
    """
    provider_cls = PROVIDER_CLASSES.get(provider.lower())
    if provider_cls is None:
        raise ProviderError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(repr(key) for key in PROVIDER_CLASSES)}"
        )
    return provider_cls(config, **client_kwargs)
