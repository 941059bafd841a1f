"""
LLM provider base class and interface.

Sandi Metz Principles:
- Single Responsibility: Provider abstraction
- Interface Segregation: Minimal provider interface
- Dependency Inversion: Depend on abstraction, not concrete classes
"""

from abc import ABC, abstractmethod

from ai_gateway.models.llm import GenerationOptions, LLMResponse


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Providers make exactly one upstream attempt per call. Retrying is
    left to the retry executor.
    """

    @abstractmethod
    async def generate_text(
        self, prompt: str, options: GenerationOptions
    ) -> LLMResponse:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text
            options: Temperature and token budget

        Returns:
            LLM response

        Raises:
            UpstreamError: If the upstream call fails
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name (e.g., "openai", "anthropic")
        """
        pass

    def _build_error_message(self, error: Exception, context: str) -> str:
        """
        Build error message with context.

        Args:
            error: The exception that occurred
            context: Context description

        Returns:
            Formatted error message
        """
        return f"{context}: {type(error).__name__} - {str(error)}"
