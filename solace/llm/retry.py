"""
Retry Policy
Declarative retry configuration and the generic retry-with-policy combinator.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from config import RETRY_BASE_DELAY, RETRY_MAX_ATTEMPTS, RETRY_MAX_DELAY, RETRY_TOTAL_TIMEOUT
from solace.errors import UpstreamError


logger = logging.getLogger(__name__)


def is_retryable(error: BaseException) -> bool:
    """Default predicate: typed upstream errors decide for themselves."""
    return isinstance(error, UpstreamError) and error.retryable


@dataclass(frozen=True)
class RetryPolicy:
    """
    Stateless retry configuration.

    Attributes:
        max_attempts: Upstream calls allowed per request, first call included
        base_delay: Backoff for the first retry, doubled per attempt
        max_delay: Cap on any computed backoff
        total_timeout: Budget for the sum of all waits (None for unbounded)
        retryable: Predicate deciding whether an error may be retried
    """

    max_attempts: int = RETRY_MAX_ATTEMPTS
    base_delay: float = RETRY_BASE_DELAY
    max_delay: float = RETRY_MAX_DELAY
    total_timeout: Optional[float] = RETRY_TOTAL_TIMEOUT
    retryable: Callable[[BaseException], bool] = is_retryable

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def backoff(self, attempt: int) -> float:
        """Exponential backoff after the given (1-indexed) failed attempt."""
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))

    def delay_for(self, error: BaseException, attempt: int) -> float:
        """
        Wait before the next attempt.

        Cold starts retry immediately, rate limits honor the server hint,
        everything else backs off.
        """
        kind = getattr(error, "kind", None)
        if kind == "unavailable":
            return 0.0
        if kind == "rate_limited":
            retry_after = getattr(error, "retry_after", None)
            if retry_after is not None:
                return max(0.0, float(retry_after))
        return self.backoff(attempt)


@dataclass
class AttemptRecord:
    attempt: int
    succeeded: bool
    kind: Optional[str] = None
    status_code: Optional[int] = None
    delay: float = 0.0  # Wait scheduled after this attempt
    elapsed: float = 0.0

    def to_dict(self):
        return {
            "attempt": self.attempt,
            "succeeded": self.succeeded,
            "kind": self.kind,
            "status_code": self.status_code,
            "delay": self.delay,
            "elapsed": round(self.elapsed, 4),
        }


@dataclass
class RetryOutcome:
    value: Any = None
    error: Optional[BaseException] = None
    attempts: List[AttemptRecord] = field(default_factory=list)
    budget_exhausted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def retry_with_policy(
    operation: Callable[[], Awaitable[Any]],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "operation"
) -> RetryOutcome:
    """
    Run an async operation under a retry policy.

    Never raises for operation failures: the last error is returned on the
    outcome. Cancellation is not caught, so an abandoned caller stops
    consuming retries immediately.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry configuration
        sleep: Awaitable sleep, injectable for tests
        label: Name used in log lines
    """
    outcome = RetryOutcome()
    waited = 0.0

    for attempt in range(1, policy.max_attempts + 1):
        started = time.monotonic()
        try:
            outcome.value = await operation()
        except Exception as e:
            record = AttemptRecord(
                attempt=attempt,
                succeeded=False,
                kind=getattr(e, "kind", type(e).__name__),
                status_code=getattr(e, "status_code", None),
                elapsed=time.monotonic() - started
            )
            outcome.attempts.append(record)
            outcome.error = e

            if not policy.retryable(e):
                logger.warning(f"[Retry] {label} failed with non-retryable {record.kind}: {e}")
                return outcome

            if attempt == policy.max_attempts:
                logger.warning(f"[Retry] {label} failed after {attempt} attempts: {e}")
                return outcome

            delay = policy.delay_for(e, attempt)
            if policy.total_timeout is not None and waited + delay > policy.total_timeout:
                logger.warning(
                    f"[Retry] {label} retry budget exhausted "
                    f"(waited {waited:.1f}s, next wait {delay:.1f}s, budget {policy.total_timeout:.1f}s)"
                )
                outcome.budget_exhausted = True
                return outcome

            record.delay = delay
            logger.info(
                f"[Retry] {label} {record.kind} on attempt {attempt}/{policy.max_attempts}, "
                f"retrying in {delay:.2f}s"
            )
            if delay > 0:
                await sleep(delay)
            waited += delay
            continue

        outcome.error = None
        outcome.attempts.append(AttemptRecord(
            attempt=attempt,
            succeeded=True,
            elapsed=time.monotonic() - started
        ))
        return outcome

    return outcome
