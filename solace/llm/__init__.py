"""
Solace LLM Module
Upstream generation backend, retry policy and fallback replies
"""

from .backend import GenerationBackend, GroqBackend
from .generation_client import GenerationClient, GenerationRequest, GenerationResult
from .retry import AttemptRecord, RetryPolicy, retry_with_policy

__all__ = [
    'GenerationBackend',
    'GroqBackend',
    'GenerationClient',
    'GenerationRequest',
    'GenerationResult',
    'RetryPolicy',
    'AttemptRecord',
    'retry_with_policy',
]
