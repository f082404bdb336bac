"""Tests for the keyword and model-backed emotion/needs classifiers."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from solace.errors import UpstreamUnavailable
from solace.extraction.classifier import (
    RESOURCE_IMMEDIATE,
    RESOURCE_PREVENTIVE,
    RESOURCE_SPECIALIZED,
    RESOURCE_THERAPY,
    URGENCY_HIGH,
    URGENCY_LOW,
    URGENCY_MEDIUM,
    KeywordClassifier,
)
from solace.extraction.model_classifier import ModelClassifier
from solace.memory.session_store import Turn


@pytest.fixture
def classifier():
    return KeywordClassifier()


# =============================================================================
# Test KeywordClassifier emotions
# =============================================================================


class TestDetectEmotions:
    """Tests for multi-label lexical emotion detection."""

    def test_multiple_labels(self, classifier):
        emotions = classifier.detect_emotions("I'm so anxious and stressed about my deadline")
        assert emotions == frozenset({"anxiety", "stress"})

    def test_shared_phrase_yields_both_labels(self, classifier):
        emotions = classifier.detect_emotions("I feel lonely and isolated")
        assert emotions == frozenset({"loneliness", "depression"})

    def test_no_emotion(self, classifier):
        assert classifier.detect_emotions("Hello there") == frozenset()

    def test_empty_text(self, classifier):
        assert classifier.detect_emotions("") == frozenset()


# =============================================================================
# Test KeywordClassifier needs
# =============================================================================


class TestAssessNeeds:
    """Tests for the layered needs assessment."""

    def test_help_request_with_medium_distress(self, classifier):
        needs = classifier.assess_needs("How do I deal with this? I'm really struggling", frozenset())
        assert needs.has_explicit_help_request
        assert needs.needs_coping
        assert needs.urgency == URGENCY_MEDIUM
        assert not needs.needs_professional_help
        assert needs.resource_type == RESOURCE_PREVENTIVE

    def test_high_urgency_means_immediate_resources(self, classifier):
        needs = classifier.assess_needs("It's all too much, I can't take it", frozenset({"stress"}))
        assert needs.urgency == URGENCY_HIGH
        assert needs.needs_professional_help
        assert needs.resource_type == RESOURCE_IMMEDIATE

    def test_professional_phrasing_means_therapy(self, classifier):
        needs = classifier.assess_needs("I think I need a therapist", frozenset())
        assert needs.needs_professional_help
        assert needs.has_explicit_help_request
        assert needs.urgency == URGENCY_LOW
        assert needs.resource_type == RESOURCE_THERAPY

    def test_severe_function_phrasing_needs_professional_help(self, classifier):
        needs = classifier.assess_needs("I can't get out of bed anymore", frozenset())
        assert needs.needs_professional_help
        assert needs.resource_type == RESOURCE_THERAPY

    def test_specialized_condition(self, classifier):
        needs = classifier.assess_needs("I have been dealing with trauma", frozenset())
        assert not needs.needs_professional_help
        assert needs.resource_type == RESOURCE_SPECIALIZED

    def test_defaults_to_low_preventive(self, classifier):
        needs = classifier.assess_needs("Hello again", frozenset())
        assert needs.urgency == URGENCY_LOW
        assert needs.resource_type == RESOURCE_PREVENTIVE
        assert not needs.needs_coping

    def test_curly_apostrophe(self, classifier):
        needs = classifier.assess_needs("I can’t take it", frozenset())
        assert needs.urgency == URGENCY_HIGH

    def test_persistent_distress_raises_low_urgency(self, classifier):
        context = [
            Turn(role="user", content="I'm so stressed"),
            Turn(role="assistant", content="That sounds hard."),
            Turn(role="user", content="still worried about everything"),
            Turn(role="assistant", content="I'm here with you."),
        ]
        assert classifier.assess_needs("Hello again", frozenset()).urgency == URGENCY_LOW
        assert classifier.assess_needs("Hello again", frozenset(), context).urgency == URGENCY_MEDIUM

    def test_assistant_turns_do_not_count_as_distress(self, classifier):
        context = [
            Turn(role="assistant", content="It sounds like you're stressed"),
            Turn(role="assistant", content="Feeling worried is common"),
        ]
        assert classifier.assess_needs("ok", frozenset(), context).urgency == URGENCY_LOW

    @pytest.mark.asyncio
    async def test_classify(self, classifier):
        emotions, needs = await classifier.classify("I'm anxious, can you help?")
        assert emotions == frozenset({"anxiety"})
        assert needs.has_explicit_help_request

    def test_to_dict(self, classifier):
        data = classifier.assess_needs("Hello", frozenset()).to_dict()
        assert data["urgency"] == URGENCY_LOW
        assert data["resource_type"] == RESOURCE_PREVENTIVE


# =============================================================================
# Test ModelClassifier
# =============================================================================


def _backend(**kwargs):
    backend = MagicMock()
    backend.complete = AsyncMock(**kwargs)
    return backend


class TestModelClassifier:
    """Tests for the backend-labelled classifier and its keyword fallback."""

    @pytest.mark.asyncio
    async def test_labels_filtered_to_taxonomy(self):
        backend = _backend(return_value='{"emotions": ["Anxiety", "joy", "stress"]}')
        classifier = ModelClassifier(backend)

        emotions, needs = await classifier.classify("Big exam tomorrow")

        assert emotions == frozenset({"anxiety", "stress"})
        assert needs.urgency == URGENCY_LOW
        assert classifier.model_calls == 1
        assert classifier.fallback_calls == 0
        assert backend.complete.await_args.kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_code_fenced_json(self):
        backend = _backend(return_value='Sure:\n```json\n{"emotions": ["loneliness"]}\n```')
        emotions, _ = await ModelClassifier(backend).classify("nobody calls me")
        assert emotions == frozenset({"loneliness"})

    @pytest.mark.asyncio
    async def test_upstream_failure_falls_back_to_keywords(self):
        backend = _backend(side_effect=UpstreamUnavailable("cold start", status_code=503))
        classifier = ModelClassifier(backend)

        emotions, _ = await classifier.classify("I'm so anxious")

        assert emotions == frozenset({"anxiety"})
        assert classifier.fallback_calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_backend_error_falls_back_to_keywords(self):
        classifier = ModelClassifier(_backend(side_effect=RuntimeError("decode failure")))

        emotions, needs = await classifier.classify("I feel anxious")

        assert emotions == frozenset({"anxiety"})
        assert needs.urgency == URGENCY_LOW
        assert classifier.fallback_calls == 1

    @pytest.mark.asyncio
    async def test_non_text_output_falls_back_to_keywords(self):
        classifier = ModelClassifier(_backend(return_value=None))
        emotions, _ = await classifier.classify("I feel anxious")
        assert emotions == frozenset({"anxiety"})
        assert classifier.fallback_calls == 1

    @pytest.mark.asyncio
    async def test_unparseable_output_falls_back_to_keywords(self):
        classifier = ModelClassifier(_backend(return_value="anxious, maybe"))
        emotions, _ = await classifier.classify("I feel so angry")
        assert emotions == frozenset({"anger"})
        assert classifier.fallback_calls == 1

    @pytest.mark.asyncio
    async def test_empty_text_skips_backend(self):
        backend = _backend(return_value='{"emotions": []}')
        emotions = await ModelClassifier(backend).detect_emotions("")
        assert emotions == frozenset()
        backend.complete.assert_not_awaited()
