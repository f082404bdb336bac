"""Root conftest.py for solace tests.

This file MUST be at the repository root so `config` and `solace` resolve
when running tests from any subdirectory.

Provides shared fixtures:
- ScriptedBackend: a GenerationBackend that replays scripted outcomes
- no_sleep: a recording replacement for asyncio.sleep
- orchestrator factory wired to in-memory collaborators
"""

from typing import List

import pytest

from solace.llm.backend import GenerationBackend
from solace.llm.generation_client import GenerationClient
from solace.llm.retry import RetryPolicy
from solace.memory.session_store import InMemorySessionStore
from solace.orchestration.orchestrator import SolaceOrchestrator


class ScriptedBackend(GenerationBackend):
    """Backend that returns or raises each scripted outcome in order.

    Strings are returned, exceptions are raised. The last outcome repeats
    once the script is exhausted.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or ["I'm here for you. How are you feeling today?"]
        self.calls: List[list] = []

    async def complete(self, messages, **options):
        self.calls.append(messages)
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def scripted_backend():
    """Factory for ScriptedBackend instances."""
    return ScriptedBackend


@pytest.fixture
def no_sleep():
    return RecordingSleep()


@pytest.fixture
def make_orchestrator(no_sleep):
    """Build an orchestrator around a scripted backend.

    Usage:
        orchestrator, backend = make_orchestrator("reply text")
    """

    def _make(*outcomes, max_attempts=3, **kwargs):
        backend = ScriptedBackend(*outcomes)
        client = GenerationClient(
            backend,
            policy=RetryPolicy(max_attempts=max_attempts, base_delay=0.01, max_delay=0.05),
            sleep=no_sleep
        )
        kwargs.setdefault("store", InMemorySessionStore())
        return SolaceOrchestrator(generation_client=client, **kwargs), backend

    return _make
