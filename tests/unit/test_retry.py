"""Tests for RetryPolicy and the retry-with-policy combinator."""

import asyncio

import pytest

from solace.errors import (
    UpstreamClientError,
    UpstreamNetworkError,
    UpstreamRateLimited,
    UpstreamUnavailable,
)
from solace.llm.retry import RetryPolicy, is_retryable, retry_with_policy


def scripted(*outcomes):
    """Zero-argument coroutine factory replaying outcomes in order."""
    calls = []

    async def operation():
        outcome = outcomes[len(calls)]
        calls.append(outcome)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    operation.calls = calls
    return operation


# =============================================================================
# Test RetryPolicy
# =============================================================================


class TestRetryPolicy:
    """Tests for the stateless policy value."""

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_exponential_backoff_is_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=5.0)
        assert [policy.backoff(n) for n in range(1, 5)] == [1.0, 2.0, 4.0, 5.0]

    def test_unavailable_retries_immediately(self):
        assert RetryPolicy().delay_for(UpstreamUnavailable(), 1) == 0.0

    def test_rate_limit_honors_retry_after(self):
        error = UpstreamRateLimited(status_code=429, retry_after=7)
        assert RetryPolicy().delay_for(error, 1) == 7.0

    def test_rate_limit_without_hint_backs_off(self):
        policy = RetryPolicy(base_delay=0.5)
        assert policy.delay_for(UpstreamRateLimited(status_code=429), 2) == 1.0

    def test_is_retryable(self):
        assert is_retryable(UpstreamNetworkError())
        assert not is_retryable(UpstreamClientError(status_code=400))
        assert not is_retryable(RuntimeError("boom"))


# =============================================================================
# Test retry_with_policy
# =============================================================================


class TestRetryWithPolicy:
    """Tests for retry loop behavior."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, no_sleep):
        outcome = await retry_with_policy(scripted("ok"), RetryPolicy(), sleep=no_sleep)
        assert outcome.succeeded
        assert outcome.value == "ok"
        assert len(outcome.attempts) == 1
        assert outcome.attempts[0].succeeded

    @pytest.mark.asyncio
    async def test_cold_start_retries_without_waiting(self, no_sleep):
        operation = scripted(
            UpstreamUnavailable(status_code=503),
            UpstreamUnavailable(status_code=503),
            UpstreamUnavailable(status_code=503),
            "warm",
        )
        outcome = await retry_with_policy(operation, RetryPolicy(max_attempts=4), sleep=no_sleep)

        assert outcome.succeeded
        assert outcome.value == "warm"
        assert len(outcome.attempts) == 4
        assert [a.succeeded for a in outcome.attempts] == [False, False, False, True]
        assert [a.kind for a in outcome.attempts[:3]] == ["unavailable"] * 3
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, no_sleep):
        operation = scripted(UpstreamClientError("bad key", status_code=401), "never")
        outcome = await retry_with_policy(operation, RetryPolicy(max_attempts=5), sleep=no_sleep)

        assert not outcome.succeeded
        assert isinstance(outcome.error, UpstreamClientError)
        assert len(operation.calls) == 1
        assert outcome.attempts[0].status_code == 401

    @pytest.mark.asyncio
    async def test_rate_limit_waits_for_retry_after(self, no_sleep):
        operation = scripted(UpstreamRateLimited(status_code=429, retry_after=2), "ok")
        outcome = await retry_with_policy(operation, RetryPolicy(), sleep=no_sleep)

        assert outcome.succeeded
        assert no_sleep.delays == [2.0]
        assert outcome.attempts[0].delay == 2.0

    @pytest.mark.asyncio
    async def test_network_errors_exhaust_attempts(self, no_sleep):
        operation = scripted(*[UpstreamNetworkError("reset")] * 3)
        policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=8.0, total_timeout=None)
        outcome = await retry_with_policy(operation, policy, sleep=no_sleep)

        assert not outcome.succeeded
        assert isinstance(outcome.error, UpstreamNetworkError)
        assert len(outcome.attempts) == 3
        assert no_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_total_timeout_bounds_waiting(self, no_sleep):
        operation = scripted(*[UpstreamNetworkError()] * 5)
        policy = RetryPolicy(max_attempts=5, base_delay=5.0, max_delay=100.0, total_timeout=6.0)
        outcome = await retry_with_policy(operation, policy, sleep=no_sleep)

        assert outcome.budget_exhausted
        assert len(outcome.attempts) == 2
        assert no_sleep.delays == [5.0]

    @pytest.mark.asyncio
    async def test_custom_retryable_predicate(self, no_sleep):
        policy = RetryPolicy(max_attempts=3, retryable=lambda e: isinstance(e, KeyError))
        outcome = await retry_with_policy(scripted(KeyError("x"), "ok"), policy, sleep=no_sleep)
        assert outcome.succeeded
        assert len(outcome.attempts) == 2

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, no_sleep):
        operation = scripted(UpstreamUnavailable(), asyncio.CancelledError())
        with pytest.raises(asyncio.CancelledError):
            await retry_with_policy(operation, RetryPolicy(max_attempts=5), sleep=no_sleep)
        assert len(operation.calls) == 2
