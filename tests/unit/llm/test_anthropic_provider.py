"""Test Anthropic LLM provider."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from anthropic import APIConnectionError, APIStatusError

from ai_gateway.exceptions import UpstreamError
from ai_gateway.llm.anthropic_provider import AnthropicProvider
from ai_gateway.llm.error_classifier import ErrorClass, classify_error
from ai_gateway.models.llm import GenerationOptions

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def status_error(status: int, message: str = "upstream said no") -> APIStatusError:
    return APIStatusError(
        message,
        response=httpx.Response(status, request=REQUEST),
        body={"type": "error", "error": {"message": message}},
    )


@pytest.fixture
def mock_anthropic_response():
    """Create mock Anthropic API response."""
    first, second = MagicMock(), MagicMock()
    first.text = '{"bullets": '
    second.text = '["Led migration"]}'
    mock_response = MagicMock()
    mock_response.content = [first, second]
    mock_response.usage.input_tokens = 12
    mock_response.usage.output_tokens = 8
    mock_response.model = "claude-3-5-haiku-latest"
    return mock_response


@pytest.fixture
def mock_client(mock_anthropic_response):
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=mock_anthropic_response)
    return client


@pytest.fixture
def anthropic_provider(mock_client):
    """Create Anthropic provider with a mocked client."""
    return AnthropicProvider(api_key="test-api-key", client=mock_client)


class TestAnthropicProvider:
    """Test Anthropic provider implementation."""

    def test_should_get_provider_name(self, anthropic_provider):
        assert anthropic_provider.get_name() == "anthropic"

    @pytest.mark.asyncio
    async def test_should_join_text_blocks(self, anthropic_provider, mock_client):
        response = await anthropic_provider.generate_text(
            "Write bullets", GenerationOptions(max_tokens=800)
        )

        assert response.content == '{"bullets": ["Led migration"]}'
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 8
        assert mock_client.messages.create.call_args.kwargs["max_tokens"] == 800

    @pytest.mark.asyncio
    async def test_overloaded_maps_to_unavailable(
        self, anthropic_provider, mock_client
    ):
        """529 is reported as 503 and retried."""
        mock_client.messages.create.side_effect = status_error(529)

        with pytest.raises(UpstreamError) as exc_info:
            await anthropic_provider.generate_text("x", GenerationOptions())

        assert exc_info.value.status == 503
        assert classify_error(exc_info.value) is ErrorClass.TRANSIENT

    @pytest.mark.asyncio
    async def test_credit_exhaustion_maps_to_quota_error(
        self, anthropic_provider, mock_client
    ):
        mock_client.messages.create.side_effect = status_error(
            400, "Your credit balance is too low to access the Anthropic API."
        )

        with pytest.raises(UpstreamError) as exc_info:
            await anthropic_provider.generate_text("x", GenerationOptions())

        assert classify_error(exc_info.value) is ErrorClass.QUOTA_EXCEEDED

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_transport_error(
        self, anthropic_provider, mock_client
    ):
        mock_client.messages.create.side_effect = APIConnectionError(request=REQUEST)

        with pytest.raises(UpstreamError) as exc_info:
            await anthropic_provider.generate_text("x", GenerationOptions())

        assert exc_info.value.is_transport_error
