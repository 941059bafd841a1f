"""Tests for the scripted mock provider."""

import pytest

from ai_gateway.exceptions import UpstreamError
from ai_gateway.models.llm import GenerationOptions
from tests.mocks.llm_mocks import MockLLMProvider, quota_error, transient_error


class TestMockLLMProvider:
    """Test script playback."""

    @pytest.mark.asyncio
    async def test_plays_back_script_and_repeats_last(self):
        provider = MockLLMProvider([transient_error(), '{"summary": "ok"}'])
        options = GenerationOptions()

        with pytest.raises(UpstreamError):
            await provider.generate_text("a", options)
        first = await provider.generate_text("b", options)
        second = await provider.generate_text("c", options)

        assert first.content == second.content == '{"summary": "ok"}'
        assert provider.prompts == ["a", "b", "c"]
        assert provider.call_count == 3

    @pytest.mark.asyncio
    async def test_reports_token_usage(self):
        provider = MockLLMProvider(prompt_tokens=7, completion_tokens=3)

        response = await provider.generate_text("x", GenerationOptions())

        assert response.total_tokens == 10

    def test_quota_error_helper(self):
        error = quota_error()

        assert error.is_quota_error
        assert error.status == 429
