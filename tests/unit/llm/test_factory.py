"""Tests for LLM provider factory."""

import pytest

from ai_gateway.config import GatewayConfig
from ai_gateway.exceptions import ConfigurationError
from ai_gateway.llm.anthropic_provider import AnthropicProvider
from ai_gateway.llm.factory import LLMProviderFactory
from ai_gateway.llm.openai_provider import OpenAIProvider


class TestLLMProviderFactory:
    """Test provider creation."""

    def test_creates_default_provider(self, test_config):
        provider = LLMProviderFactory.create(settings=test_config)

        assert isinstance(provider, OpenAIProvider)

    def test_creates_anthropic_provider(self, test_config):
        provider = LLMProviderFactory.create("anthropic", settings=test_config)

        assert isinstance(provider, AnthropicProvider)
        assert provider.get_name() == "anthropic"

    def test_provider_name_is_case_insensitive(self, test_config):
        assert isinstance(
            LLMProviderFactory.create("OpenAI", settings=test_config), OpenAIProvider
        )

    def test_invalid_provider(self, test_config):
        with pytest.raises(ConfigurationError, match="Invalid provider"):
            LLMProviderFactory.create("gemini", settings=test_config)

    def test_missing_api_key(self):
        settings = GatewayConfig(openai_api_key="", anthropic_api_key="")

        with pytest.raises(ConfigurationError, match="API key not configured"):
            LLMProviderFactory.create("openai", settings=settings)
