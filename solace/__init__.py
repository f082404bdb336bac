"""
Solace - Mental Health Support Pipeline

Turn-based support sessions on top of an external generation backend:
- Lexical crisis detection before any network call
- Resilient generation with typed retry policy and deterministic fallback
- Response validation and context enhancement
- Bounded per-session conversational memory
"""

__version__ = "1.0.0"

from solace.errors import InputError, SolaceError, UpstreamError
from solace.llm.backend import GroqBackend
from solace.llm.generation_client import GenerationClient
from solace.memory.session_store import InMemorySessionStore
from solace.orchestration.orchestrator import LoggingCrisisSink, ProcessedMessage, SolaceOrchestrator

__all__ = [
    'SolaceOrchestrator',
    'ProcessedMessage',
    'LoggingCrisisSink',
    'GenerationClient',
    'GroqBackend',
    'InMemorySessionStore',
    'SolaceError',
    'InputError',
    'UpstreamError',
]
