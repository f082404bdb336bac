"""
Model Classifier
Emotion labelling delegated to the generation backend, with the keyword
classifier as a safety net.
"""
import json
import logging
from typing import Dict, FrozenSet, Optional

from solace.errors import UpstreamError
from solace.extraction.classifier import EMOTION_TAXONOMY, Classifier, KeywordClassifier
from solace.llm.backend import GenerationBackend


logger = logging.getLogger(__name__)


CLASSIFIER_PROMPT = """SYSTEM: You label the emotional content of a single user message for a mental health support service.

USER MESSAGE:
"{text}"

ALLOWED LABELS: {labels}

Pick every label that clearly applies (zero, one or many). Do not invent labels.

OUTPUT FORMAT (JSON only, no other text):
{{
    "emotions": ["label", "label"]
}}"""


class ModelClassifier(Classifier):
    """
    Model-backed classifier.

    Emotions come from the backend, restricted to the fixed taxonomy. Needs
    are derived from the text and those emotions with the same rules as the
    keyword classifier, so urgency tiers stay deterministic. Any upstream
    failure or unparseable output falls back to keyword detection.
    """

    def __init__(self, backend: GenerationBackend, fallback: Optional[KeywordClassifier] = None):
        self.backend = backend
        self.fallback = fallback or KeywordClassifier()
        self.model_calls = 0
        self.fallback_calls = 0

    async def classify(self, text, context=None):
        emotions = await self.detect_emotions(text)
        return emotions, self.fallback.assess_needs(text, emotions, context)

    async def detect_emotions(self, text: str) -> FrozenSet[str]:
        if not text:
            return frozenset()

        prompt = CLASSIFIER_PROMPT.format(text=text[:500], labels=", ".join(EMOTION_TAXONOMY))
        messages = [
            {"role": "system", "content": "You are a classification system. Respond only with valid JSON."},
            {"role": "user", "content": prompt},
        ]

        self.model_calls += 1
        try:
            raw = await self.backend.complete(messages, temperature=0.0, max_tokens=60)
        except UpstreamError as e:
            logger.warning(f"[ModelClassifier] Upstream failed, using keywords: {e!r}")
            self.fallback_calls += 1
            return self.fallback.detect_emotions(text)
        except Exception as e:
            logger.error(f"[ModelClassifier] Backend error, using keywords: {e!r}")
            self.fallback_calls += 1
            return self.fallback.detect_emotions(text)

        parsed = self._parse_json_response(raw) if isinstance(raw, str) else None
        if parsed is None or not isinstance(parsed.get("emotions"), list):
            logger.warning("[ModelClassifier] Unparseable output, using keywords")
            self.fallback_calls += 1
            return self.fallback.detect_emotions(text)

        return frozenset(
            label.strip().lower() for label in parsed["emotions"]
            if isinstance(label, str) and label.strip().lower() in EMOTION_TAXONOMY
        )

    def _parse_json_response(self, response: str) -> Optional[Dict]:
        """Parse JSON from a model response, tolerating code fences and prose."""
        candidates = [response]
        if "```json" in response:
            candidates.append(response.split("```json")[1].split("```")[0])
        elif "```" in response:
            candidates.append(response.split("```")[1].split("```")[0])

        start = response.find("{")
        end = response.rfind("}") + 1
        if start >= 0 and end > start:
            candidates.append(response[start:end])

        for candidate in candidates:
            try:
                parsed = json.loads(candidate.strip())
            except (ValueError, TypeError):
                continue
            if isinstance(parsed, dict):
                return parsed
        return None
