"""
LLM provider factory.

Sandi Metz Principles:
- Single Responsibility: Create provider instances
- Open/Closed: New providers are one table entry
- Dependency Inversion: Returns interface, not concrete class
"""

from typing import Dict, NamedTuple, Type

from ai_gateway.config import GatewayConfig, config
from ai_gateway.exceptions import ConfigurationError
from ai_gateway.llm.anthropic_provider import AnthropicProvider
from ai_gateway.llm.openai_provider import OpenAIProvider
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class ProviderSpec(NamedTuple):
    """Where a provider reads its credentials and model from."""

    provider_class: Type[BaseLLMProvider]
    key_setting: str
    model_setting: str
    label: str


PROVIDERS: Dict[str, ProviderSpec] = {
    "openai": ProviderSpec(OpenAIProvider, "openai_api_key", "default_model", "OpenAI"),
    "anthropic": ProviderSpec(
        AnthropicProvider, "anthropic_api_key", "anthropic_model", "Anthropic"
    ),
}


class LLMProviderFactory:
    """Builds the upstream provider named in configuration."""

    @staticmethod
    def create(
        provider_name: str | None = None, settings: GatewayConfig | None = None
    ) -> BaseLLMProvider:
        """
        Create LLM provider instance.

        Args:
            provider_name: "openai" or "anthropic"; configured default if None
            settings: Configuration to read keys from (module config if None)

        Returns:
            LLM provider instance

        Raises:
            ConfigurationError: If provider name is invalid or API key missing
        """
        settings = settings or config
        name = (provider_name or settings.default_llm_provider).lower()

        entry = PROVIDERS.get(name)
        if entry is None:
            raise ConfigurationError(
                f"Invalid provider: {name}. Valid providers: {', '.join(PROVIDERS)}"
            )

        api_key = getattr(settings, entry.key_setting)
        if not api_key:
            raise ConfigurationError(f"{entry.label} API key not configured")

        model = getattr(settings, entry.model_setting)
        logger.info("Created upstream provider", provider=name, model=model)
        return entry.provider_class(api_key=api_key, model=model)
