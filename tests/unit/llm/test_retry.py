"""
Tests for retry executor.
"""

import asyncio
from types import SimpleNamespace

import pytest

from ai_gateway.exceptions import (
    DeadlineExceededError,
    UpstreamError,
    UpstreamExhaustedError,
    UpstreamFatalError,
    UpstreamQuotaExceededError,
)
from ai_gateway.llm.retry import RetryExecutor, RetryPolicy
from ai_gateway.llm.timeout_handler import Deadline
from tests.mocks.clocks import FakeClock, RecordingSleep
from tests.mocks.llm_mocks import fatal_error, quota_error, transient_error


def scripted(*outcomes):
    """Build an operation that plays back outcomes and counts calls."""
    calls = []

    async def operation():
        outcome = outcomes[min(len(calls), len(outcomes) - 1)]
        calls.append(outcome)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    operation.calls = calls
    return operation


class TestRetryPolicy:
    """Test retry policy arithmetic."""

    def test_default_policy(self):
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.retryable_statuses == frozenset({429, 503})

    def test_delay_grows_exponentially(self):
        policy = RetryPolicy(base_delay=2.0, backoff_multiplier=2.0)

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_delay_is_capped(self):
        policy = RetryPolicy(base_delay=2.0, backoff_multiplier=10.0, max_delay=5.0)

        assert policy.delay_for(3) == 5.0

    def test_total_backoff_sums_sleeps_between_attempts(self):
        policy = RetryPolicy(max_attempts=3, base_delay=2.0, backoff_multiplier=2.0)

        assert policy.total_backoff() == 6.0

    def test_from_settings(self):
        settings = SimpleNamespace(
            retry_max_attempts=5,
            retry_base_delay_seconds=0.5,
            retry_backoff_multiplier=3.0,
            retry_max_delay_seconds=10.0,
            upstream_timeout_seconds=12.0,
        )

        policy = RetryPolicy.from_settings(settings)

        assert policy.max_attempts == 5
        assert policy.delay_for(2) == 1.5
        assert policy.attempt_timeout == 12.0


class TestRetryExecutor:
    """Test retry executor functionality."""

    @pytest.mark.asyncio
    async def test_execute_success_first_attempt(self, fast_retry, recording_sleep):
        """Test successful execution on first attempt."""
        operation = scripted("ok")

        assert await fast_retry.execute(operation) == "ok"
        assert len(operation.calls) == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_transient_errors_with_backoff(
        self, fast_retry, recording_sleep
    ):
        """Transient failures are retried after 2s then 4s."""
        operation = scripted(transient_error(503), transient_error(429), "ok")

        assert await fast_retry.execute(operation) == "ok"
        assert len(operation.calls) == 3
        assert recording_sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_exhausts_after_max_attempts(self, fast_retry, recording_sleep):
        """Exactly max_attempts attempts are made, never more."""
        last = transient_error(503)
        operation = scripted(transient_error(503), transient_error(503), last)

        with pytest.raises(UpstreamExhaustedError) as exc_info:
            await fast_retry.execute(operation)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is last
        assert len(operation.calls) == 3
        assert recording_sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_quota_error_is_not_retried(self, fast_retry, recording_sleep):
        operation = scripted(quota_error())

        with pytest.raises(UpstreamQuotaExceededError):
            await fast_retry.execute(operation)

        assert len(operation.calls) == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_quota_after_transient_stops_retrying(self, fast_retry):
        operation = scripted(transient_error(503), quota_error(), "ok")

        with pytest.raises(UpstreamQuotaExceededError):
            await fast_retry.execute(operation)

        assert len(operation.calls) == 2

    @pytest.mark.asyncio
    async def test_fatal_error_is_not_retried(self, fast_retry):
        operation = scripted(fatal_error(400))

        with pytest.raises(UpstreamFatalError) as exc_info:
            await fast_retry.execute(operation)

        assert exc_info.value.status == 400
        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_fatal(self, fast_retry):
        operation = scripted(ValueError("bad payload"))

        with pytest.raises(UpstreamFatalError):
            await fast_retry.execute(operation)

        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_custom_retryable_statuses(self, recording_sleep):
        executor = RetryExecutor(
            RetryPolicy(retryable_statuses=frozenset({500})), sleep=recording_sleep
        )
        operation = scripted(UpstreamError("boom", status=500), "ok")

        assert await executor.execute(operation) == "ok"
        assert recording_sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_deadline_shorter_than_backoff_stops_retrying(self):
        """A retry that cannot finish before the deadline is not attempted."""
        clock = FakeClock(0.0)
        sleep = RecordingSleep(clock)
        executor = RetryExecutor(RetryPolicy(max_attempts=3), sleep=sleep)
        deadline = Deadline.after(3.0, clock)
        operation = scripted(transient_error(503))

        with pytest.raises(DeadlineExceededError):
            await executor.execute(operation, deadline)

        assert len(operation.calls) == 2
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_expired_deadline_makes_no_attempt(self, fast_retry):
        clock = FakeClock(0.0)
        deadline = Deadline.after(1.0, clock)
        clock.advance(5.0)
        operation = scripted("ok")

        with pytest.raises(DeadlineExceededError):
            await fast_retry.execute(operation, deadline)

        assert operation.calls == []

    @pytest.mark.asyncio
    async def test_attempt_timeout_is_retried(self, recording_sleep):
        """A hung attempt times out and counts as transient."""
        executor = RetryExecutor(
            RetryPolicy(max_attempts=2, attempt_timeout=0.01), sleep=recording_sleep
        )
        calls = []

        async def hang():
            calls.append(1)
            await asyncio.sleep(1)

        with pytest.raises(UpstreamExhaustedError) as exc_info:
            await executor.execute(hang)

        assert len(calls) == 2
        assert exc_info.value.last_error.is_transport_error

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, fast_retry):
        """Cancelling the caller is never swallowed as an upstream error."""
        operation = scripted(asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await fast_retry.execute(operation)

        assert len(operation.calls) == 1
