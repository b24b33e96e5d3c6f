"""Provider endpoint configuration.

Keeps the per-vendor constants (base URL, endpoint path, protocol version,
default model) in one place so clients do not hard-code them.
"""

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class ProviderConfig:
    """Static description of one provider backend."""

    name: str
    base_url: str
    endpoint: str
    default_model: str
    api_version: Optional[str] = None


ANTHROPIC_CONFIG = ProviderConfig(
    name="anthropic",
    base_url="https://api.anthropic.com",
    endpoint="/v1/messages",
    default_model="claude-3-5-haiku-20241022",
    api_version="2023-06-01",
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "anthropic": ANTHROPIC_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """Look up a ProviderConfig by name, case-insensitively."""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
