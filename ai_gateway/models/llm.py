"""
LLM request and response models.

Sandi Metz Principles:
- Small classes focused on LLM interaction
- Clear separation of request and response
- Immutable data structures
"""

from pydantic import BaseModel, ConfigDict, Field


class GenerationOptions(BaseModel):
    """Options forwarded with a text generation prompt."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2000, ge=1, description="Max output tokens")


class LLMResponse(BaseModel):
    """LLM response model."""

    content: str = Field(..., description="Response content")
    prompt_tokens: int = Field(..., description="Prompt tokens", ge=0)
    completion_tokens: int = Field(..., description="Completion tokens", ge=0)
    model: str = Field(..., description="Model used")

    @property
    def total_tokens(self) -> int:
        """Calculate total tokens."""
        return self.prompt_tokens + self.completion_tokens
