"""
Anthropic LLM provider implementation.

Sandi Metz Principles:
- Single Responsibility: Anthropic API interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API key and model injected
"""

from anthropic import AnthropicError, APIConnectionError, APIStatusError, AsyncAnthropic

from ai_gateway.exceptions import UpstreamError
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.models.llm import GenerationOptions, LLMResponse
from ai_gateway.utils.logger import get_logger, log_llm_call

logger = get_logger(__name__)

OVERLOADED_STATUS = 529
CREDIT_EXHAUSTED_MARKER = "credit balance"


class AnthropicProvider(BaseLLMProvider):
    """
    Anthropic/Claude implementation of LLM provider.

    Overloaded responses (529) are reported as 503 so they classify the
    same way as other temporary unavailability.
    """

    def __init__(
        self, api_key: str, model: str = "claude-3-5-haiku-latest", client=None
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Messages API model
            client: Optional preconfigured AsyncAnthropic client
        """
        self._api_key = api_key
        self._model = model
        self._client: AsyncAnthropic | None = client

    async def generate_text(
        self, prompt: str, options: GenerationOptions
    ) -> LLMResponse:
        """
        Generate text using Anthropic.

        Args:
            prompt: Prompt text
            options: Generation options

        Returns:
            LLM response

        Raises:
            UpstreamError: If API call fails
        """
        try:
            return await self._make_api_call(prompt, options)
        except APIStatusError as e:
            logger.error("Anthropic error", status=e.status_code, error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "Anthropic API call failed"),
                status=self._normalize_status(e.status_code),
                is_quota_error=CREDIT_EXHAUSTED_MARKER in str(e).lower(),
            ) from e
        except APIConnectionError as e:
            logger.error("Anthropic connection error", error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "Anthropic connection failed"),
                is_transport_error=True,
            ) from e
        except AnthropicError as e:
            logger.error("Anthropic error", error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "Anthropic API call failed")
            ) from e

    async def _make_api_call(
        self, prompt: str, options: GenerationOptions
    ) -> LLMResponse:
        """
        Make Anthropic API call.

        Args:
            prompt: Prompt text
            options: Generation options

        Returns:
            LLM response
        """
        client = self._get_client()

        response = await client.messages.create(
            model=self._model,
            max_tokens=options.max_tokens,
            temperature=options.temperature,
            messages=[{"role": "user", "content": prompt}],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "text", None)
        )
        llm_response = LLMResponse(
            content=text,
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            model=response.model,
        )

        log_llm_call(
            provider="anthropic",
            model=llm_response.model,
            tokens=llm_response.total_tokens,
        )

        return llm_response

    @staticmethod
    def _normalize_status(status: int) -> int:
        """Map Anthropic's overloaded status onto 503."""
        return 503 if status == OVERLOADED_STATUS else status

    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        return "anthropic"

    def _get_client(self) -> AsyncAnthropic:
        """
        Get or create Anthropic client.

        Returns:
            Anthropic async client
        """
        if not self._client:
            self._client = AsyncAnthropic(api_key=self._api_key, max_retries=0)
        return self._client
