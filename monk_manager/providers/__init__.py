"""LLM provider integration layer.

Modules in this package:
- base: the AIClient protocol.
- registry: per-provider endpoint constants.
- anthropic_client: the Anthropic implementation.
"""

from typing import Callable, Dict

from monk_manager.domain.exceptions import ConfigurationError
from monk_manager.domain.models import ModelConfig
from monk_manager.providers.anthropic_client import AnthropicClient
from monk_manager.providers.base import AIClient
from monk_manager.providers.registry import ProviderConfig, get_provider_config


CLIENT_FACTORIES: Dict[str, Callable[..., AIClient]] = {
    "anthropic": AnthropicClient,
}


def create_provider(config: ModelConfig) -> AIClient:
    """Create the client named by `config.provider`; unknown tags never fall back."""

    try:
        provider_cfg: ProviderConfig = get_provider_config(config.provider)
    except KeyError:
        raise ConfigurationError(f"Unsupported AI provider: {config.provider}") from None
    factory = CLIENT_FACTORIES.get(provider_cfg.name)
    if factory is None:
        raise ConfigurationError(f"No client available for AI provider: {provider_cfg.name}")
    return factory(config, provider=provider_cfg)


__all__ = ["AIClient", "AnthropicClient", "CLIENT_FACTORIES", "create_provider"]
