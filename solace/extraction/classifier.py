"""
Emotion & Needs Classifier
Multi-label emotion detection and layered needs assessment.

The orchestrator only depends on the Classifier capability, so a model-backed
variant can replace the keyword rules without touching the pipeline.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Tuple


EMOTION_TAXONOMY = ("anxiety", "depression", "stress", "anger", "loneliness")

URGENCY_LOW = "low"
URGENCY_MEDIUM = "medium"
URGENCY_HIGH = "high"

RESOURCE_IMMEDIATE = "immediate"
RESOURCE_THERAPY = "therapy"
RESOURCE_SPECIALIZED = "specialized"
RESOURCE_PREVENTIVE = "preventive"

EMOTION_PATTERNS = {
    "anxiety": [
        "anxious", "worried", "nervous", "panic", "scared", "afraid",
        "restless", "on edge", "tense", "racing thoughts", "can't relax",
    ],
    "depression": [
        "sad", "down", "empty", "numb", "hopeless", "worthless",
        "tired", "exhausted", "no energy", "can't enjoy", "isolated", "depressed",
    ],
    "stress": [
        "stressed", "overwhelmed", "pressure", "too much", "can't handle",
        "burned out", "stretched thin", "deadline", "workload",
    ],
    "anger": [
        "angry", "frustrated", "irritated", "mad", "furious",
        "annoyed", "rage", "pissed off", "fed up",
    ],
    "loneliness": [
        "lonely", "alone", "isolated", "disconnected", "no one understands",
        "no friends", "left out", "abandoned",
    ],
}

HELP_REQUEST_KEYWORDS = [
    "how do i", "what should i do", "can you help", "i need",
    "what can i", "how can i", "advice", "suggestions",
]

DISTRESS_KEYWORDS = [
    "struggling", "difficult", "hard time", "can't handle",
    "overwhelming", "overwhelmed", "stressed", "anxious", "depressed",
    "sad", "worried", "scared", "alone",
]

# Checked in order; the first tier with a hit wins
URGENCY_KEYWORDS = [
    (URGENCY_HIGH, ["can't take it", "unbearable", "too much", "breaking down", "can't take this anymore"]),
    (URGENCY_MEDIUM, ["really struggling", "very difficult", "hard time"]),
    (URGENCY_LOW, ["a bit", "somewhat", "little"]),
]

PROFESSIONAL_KEYWORDS = [
    "therapist", "counselor", "professional help", "treatment",
    "medication", "therapy", "psychiatrist",
]

SEVERE_CONCERN_KEYWORDS = [
    "can't function", "can't get out of bed", "can't work",
    "can't sleep", "not eating", "drinking too much",
    "using drugs", "hallucinations", "voices",
]

SPECIALIZED_KEYWORDS = [
    "eating disorder", "trauma", "ptsd", "addiction",
    "substance abuse", "bipolar", "ocd", "adhd",
]


@dataclass(frozen=True)
class NeedsAssessment:
    needs_coping: bool = False
    needs_professional_help: bool = False
    urgency: str = URGENCY_LOW
    resource_type: str = RESOURCE_PREVENTIVE
    has_explicit_help_request: bool = False

    def to_dict(self):
        return {
            "needs_coping": self.needs_coping,
            "needs_professional_help": self.needs_professional_help,
            "urgency": self.urgency,
            "resource_type": self.resource_type,
            "has_explicit_help_request": self.has_explicit_help_request,
        }


def _normalize(text: str) -> str:
    # Curly apostrophes from mobile keyboards
    return text.lower().replace("’", "'")


def _contains_any(text_lower: str, keywords) -> bool:
    return any(k in text_lower for k in keywords)


class Classifier(ABC):
    """Capability for turning a user message into emotions and needs."""

    @abstractmethod
    async def classify(
        self,
        text: str,
        context: Optional[Sequence] = None
    ) -> Tuple[FrozenSet[str], NeedsAssessment]:
        """
        Classify a message.

        Args:
            text: User message
            context: Recent session turns, oldest first

        Returns:
            (emotion labels, needs assessment)
        """


class KeywordClassifier(Classifier):
    """
    Lexical classifier.

    Needs assessment layers three independent signals:
    - explicit help-request phrasing
    - distress intensity mapped to urgency tiers
    - professional-help or severe-function phrasing
    """

    def __init__(self, emotion_patterns=None, escalation_turns: int = 2):
        self.emotion_patterns = emotion_patterns or EMOTION_PATTERNS
        # Prior distressed user turns needed to raise low urgency to medium
        self.escalation_turns = escalation_turns

    async def classify(self, text, context=None):
        emotions = self.detect_emotions(text)
        return emotions, self.assess_needs(text, emotions, context)

    def detect_emotions(self, text: str) -> FrozenSet[str]:
        """Detect every emotion whose phrase set matches the text."""
        if not text:
            return frozenset()

        text_lower = _normalize(text)
        return frozenset(
            emotion for emotion, patterns in self.emotion_patterns.items()
            if _contains_any(text_lower, patterns)
        )

    def assess_needs(
        self,
        text: str,
        emotions: FrozenSet[str],
        context: Optional[Sequence] = None
    ) -> NeedsAssessment:
        """Assess what kind of support the message calls for."""
        text_lower = _normalize(text or "")

        has_help_request = _contains_any(text_lower, HELP_REQUEST_KEYWORDS)
        is_distressed = _contains_any(text_lower, DISTRESS_KEYWORDS)
        needs_coping = has_help_request or is_distressed

        urgency = URGENCY_LOW
        for level, keywords in URGENCY_KEYWORDS:
            if _contains_any(text_lower, keywords):
                urgency = level
                break

        if urgency == URGENCY_LOW and self._is_persistent_distress(context):
            urgency = URGENCY_MEDIUM

        explicit_professional = _contains_any(text_lower, PROFESSIONAL_KEYWORDS)
        needs_professional_help = (
            explicit_professional
            or urgency == URGENCY_HIGH
            or _contains_any(text_lower, SEVERE_CONCERN_KEYWORDS)
        )

        if urgency == URGENCY_HIGH:
            resource_type = RESOURCE_IMMEDIATE
        elif needs_professional_help:
            resource_type = RESOURCE_THERAPY
        elif _contains_any(text_lower, SPECIALIZED_KEYWORDS):
            resource_type = RESOURCE_SPECIALIZED
        else:
            resource_type = RESOURCE_PREVENTIVE

        return NeedsAssessment(
            needs_coping=needs_coping,
            needs_professional_help=needs_professional_help,
            urgency=urgency,
            resource_type=resource_type,
            has_explicit_help_request=has_help_request
        )

    def _is_persistent_distress(self, context: Optional[Sequence]) -> bool:
        if not context:
            return False

        distressed = 0
        for turn in context:
            if getattr(turn, "role", None) != "user":
                continue
            if _contains_any(_normalize(turn.content), DISTRESS_KEYWORDS):
                distressed += 1

        return distressed >= self.escalation_turns
