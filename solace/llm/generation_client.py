"""
Generation Client
Resilient access to the upstream generation backend.

Every upstream failure is absorbed here. Callers always receive text: the
generated reply, or a deterministic fallback once the retry policy gives up.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from config import DEFAULT_LANGUAGE
from solace.llm.backend import GenerationBackend
from solace.llm.fallback import fallback_response
from solace.llm.prompts import build_messages
from solace.llm.retry import AttemptRecord, RetryPolicy, retry_with_policy


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    history: tuple = ()
    language: str = DEFAULT_LANGUAGE


@dataclass
class GenerationResult:
    text: str
    fallback_used: bool = False
    attempts: List[AttemptRecord] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return not self.fallback_used

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    def to_dict(self):
        return {
            "fallback_used": self.fallback_used,
            "attempts": [a.to_dict() for a in self.attempts],
            "error": repr(self.error) if self.error else None,
        }


class GenerationClient:
    """
    Wraps a GenerationBackend with a RetryPolicy.

    - rate limited: retry after the server hint or policy backoff
    - unavailable (cold start, 5xx): retry immediately
    - client error (400/401): abort on the first attempt
    - network/timeout: retry with policy backoff
    """

    def __init__(
        self,
        backend: GenerationBackend,
        policy: Optional[RetryPolicy] = None,
        fallback: Callable[[str], str] = fallback_response,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.backend = backend
        self.policy = policy or RetryPolicy()
        self.fallback = fallback
        self.sleep = sleep

        # Counters for get_stats()
        self.total_requests = 0
        self.total_attempts = 0
        self.fallback_count = 0

    async def generate(
        self,
        prompt: str,
        history: Sequence = (),
        language: str = DEFAULT_LANGUAGE
    ) -> GenerationResult:
        """
        Generate a reply for the prompt given recent history.

        Args:
            prompt: Bounded user message
            history: Recent Turns, oldest first
            language: Response language code

        Returns:
            GenerationResult; text is never empty
        """
        request = GenerationRequest(prompt=prompt, history=tuple(history), language=language)
        return await self.run(request)

    async def run(self, request: GenerationRequest) -> GenerationResult:
        messages = build_messages(request.prompt, request.history, request.language)

        async def attempt():
            return await self.backend.complete(messages)

        self.total_requests += 1
        outcome = await retry_with_policy(
            attempt,
            self.policy,
            sleep=self.sleep,
            label="GenerationClient"
        )
        self.total_attempts += len(outcome.attempts)

        if outcome.succeeded:
            return GenerationResult(text=outcome.value, attempts=outcome.attempts)

        self.fallback_count += 1
        logger.warning(
            f"[GenerationClient] Using fallback after {len(outcome.attempts)} attempt(s): "
            f"{outcome.error!r}"
        )
        return GenerationResult(
            text=self.fallback(request.prompt),
            fallback_used=True,
            attempts=outcome.attempts,
            error=outcome.error
        )

    def get_stats(self):
        return {
            "total_requests": self.total_requests,
            "total_attempts": self.total_attempts,
            "fallback_count": self.fallback_count,
            "fallback_rate": self.fallback_count / max(1, self.total_requests),
            "max_attempts": self.policy.max_attempts,
        }
