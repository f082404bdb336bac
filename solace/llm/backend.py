"""
Generation Backend
The network boundary to the upstream text-generation service.

Backends translate transport failures into the typed UpstreamError taxonomy;
they never retry on their own.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import groq
from groq import AsyncGroq

from config import (
    GENERATION_MAX_TOKENS,
    GENERATION_TEMPERATURE,
    GENERATION_TOP_P,
    GROQ_MODEL,
    GROQ_MODEL_FALLBACK,
    REQUEST_TIMEOUT,
)
from solace.errors import (
    UpstreamClientError,
    UpstreamError,
    UpstreamNetworkError,
    UpstreamRateLimited,
    UpstreamUnavailable,
)


logger = logging.getLogger(__name__)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds. HTTP dates are ignored."""
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def classify_status(
    status_code: int,
    message: str = "",
    retry_after: Optional[float] = None
) -> UpstreamError:
    """Map an HTTP status from the backend onto the upstream error taxonomy."""
    if status_code == 429:
        return UpstreamRateLimited(message, status_code=status_code, retry_after=retry_after)
    if status_code == 408:
        return UpstreamNetworkError(message, status_code=status_code)
    if status_code >= 500:
        return UpstreamUnavailable(message, status_code=status_code)
    return UpstreamClientError(message, status_code=status_code)


class GenerationBackend(ABC):
    """Produces free text from a list of chat messages."""

    @abstractmethod
    async def complete(self, messages: List[Dict[str, str]], **options) -> str:
        """
        Run one completion.

        Raises:
            UpstreamError: Typed failure for every unsuccessful call
        """


class GroqBackend(GenerationBackend):
    """
    Groq chat completions backend.

    The SDK's built-in retries are disabled so the generation client's
    policy is the only retry loop. A missing model (404) switches to the
    fallback model once and reports a retryable failure so the next attempt
    uses it.
    """

    def __init__(
        self,
        api_key: str,
        model: str = GROQ_MODEL,
        fallback_model: Optional[str] = GROQ_MODEL_FALLBACK,
        max_tokens: int = GENERATION_MAX_TOKENS,
        temperature: float = GENERATION_TEMPERATURE,
        timeout: float = REQUEST_TIMEOUT,
        client: Optional[AsyncGroq] = None
    ):
        if not api_key and client is None:
            raise ValueError("GROQ_API_KEY must be set in environment or passed as argument")

        self.llm = client or AsyncGroq(api_key=api_key, max_retries=0, timeout=timeout)
        self.model = model
        self.fallback_model = fallback_model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, messages: List[Dict[str, str]], **options) -> str:
        try:
            response = await self.llm.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=options.get("max_tokens", self.max_tokens),
                temperature=options.get("temperature", self.temperature),
                top_p=GENERATION_TOP_P,
                stream=False
            )
        except groq.APITimeoutError as e:
            raise UpstreamNetworkError(f"Request timed out: {e}") from e
        except groq.APIConnectionError as e:
            raise UpstreamNetworkError(f"Connection failed: {e}") from e
        except groq.APIStatusError as e:
            raise self._translate_status_error(e) from e

        content = None
        if response.choices:
            content = response.choices[0].message.content

        if not content or not content.strip():
            raise UpstreamUnavailable("Empty response from Groq API")

        return content.strip()

    def _translate_status_error(self, error: "groq.APIStatusError") -> UpstreamError:
        status = error.status_code

        if status == 404 and self.fallback_model and self.model != self.fallback_model:
            logger.warning(
                f"[GroqBackend] Model {self.model} not found, switching to {self.fallback_model}"
            )
            self.model = self.fallback_model
            return UpstreamUnavailable(f"Model not found: {error}", status_code=status)

        retry_after = None
        if error.response is not None:
            retry_after = parse_retry_after(error.response.headers.get("retry-after"))

        return classify_status(status, str(error), retry_after=retry_after)
