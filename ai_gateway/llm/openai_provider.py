"""
OpenAI LLM provider implementation.

Sandi Metz Principles:
- Single Responsibility: OpenAI API interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API key and model injected
"""

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from ai_gateway.exceptions import UpstreamError
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.models.llm import GenerationOptions, LLMResponse
from ai_gateway.utils.logger import get_logger, log_llm_call

logger = get_logger(__name__)

QUOTA_ERROR_CODE = "insufficient_quota"


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI implementation of LLM provider.

    SDK failures are translated into UpstreamError with the HTTP status
    and quota flag the retry executor classifies on.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", client=None):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Chat completion model
            client: Optional preconfigured AsyncOpenAI client
        """
        self._api_key = api_key
        self._model = model
        self._client: AsyncOpenAI | None = client

    async def generate_text(
        self, prompt: str, options: GenerationOptions
    ) -> LLMResponse:
        """
        Generate text using OpenAI.

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
            logger.error("OpenAI error", status=e.status_code, error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "OpenAI API call failed"),
                status=e.status_code,
                is_quota_error=self._is_quota_error(e),
            ) from e
        except APIConnectionError as e:
            logger.error("OpenAI connection error", error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "OpenAI connection failed"),
                is_transport_error=True,
            ) from e
        except OpenAIError as e:
            logger.error("OpenAI error", error=str(e))
            raise UpstreamError(
                self._build_error_message(e, "OpenAI API call failed")
            ) from e

    async def _make_api_call(
        self, prompt: str, options: GenerationOptions
    ) -> LLMResponse:
        """
        Make OpenAI API call.

        Args:
            prompt: Prompt text
            options: Generation options

        Returns:
            LLM response
        """
        client = self._get_client()

        response = await client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )

        llm_response = LLMResponse(
            content=response.choices[0].message.content or "",
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=(
                response.usage.completion_tokens if response.usage else 0
            ),
            model=response.model,
        )

        log_llm_call(
            provider="openai",
            model=llm_response.model,
            tokens=llm_response.total_tokens,
        )

        return llm_response

    @staticmethod
    def _is_quota_error(error: APIStatusError) -> bool:
        """OpenAI reports an exhausted quota as a 429 with a distinct code."""
        return getattr(error, "code", None) == QUOTA_ERROR_CODE

    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        return "openai"

    def _get_client(self) -> AsyncOpenAI:
        """
        Get or create OpenAI client.

        Returns:
            OpenAI async client
        """
        if not self._client:
            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
        return self._client
