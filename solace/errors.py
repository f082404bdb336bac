"""
Solace Errors
Typed failures raised across the pipeline.

Only InputError ever reaches callers of the orchestrator. Upstream errors are
absorbed by the generation client and surface as fallback text plus logs.
"""
from typing import Optional


class SolaceError(Exception):
    """Base class for all Solace errors."""


class InputError(SolaceError, ValueError):
    """Rejected user input (empty, non-string or whitespace-only text)."""


class UpstreamError(SolaceError):
    """
    Failure talking to the upstream generation backend.

    Attributes:
        kind: One of rate_limited, unavailable, client_error, network
        retryable: Whether another attempt may succeed
        status_code: HTTP status when the backend answered
        retry_after: Server-provided wait hint in seconds
    """

    kind = "upstream"
    retryable = False

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message or self.kind)
        self.status_code = status_code
        self.retry_after = retry_after

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, status_code={self.status_code!r})"


class UpstreamRateLimited(UpstreamError):
    kind = "rate_limited"
    retryable = True


class UpstreamUnavailable(UpstreamError):
    """Cold start, overload or 5xx. Safe to retry without waiting."""

    kind = "unavailable"
    retryable = True


class UpstreamNetworkError(UpstreamError):
    kind = "network"
    retryable = True


class UpstreamClientError(UpstreamError):
    """Malformed request or bad credentials. Retrying cannot help."""

    kind = "client_error"
    retryable = False
