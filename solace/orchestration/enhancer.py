"""
Context Enhancer
Augments generated replies with validation, coping strategies and resources.

Enhancement is two pure steps: build_bundle() decides what to add from the
(emotions, needs) pair, apply_bundle() renders it into the text. Every
section is skipped when the text already carries it, so repeated enhancement
never stacks the same guidance twice.
"""
import random
import re
import zlib
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from config import (
    MAX_COPING_STRATEGIES,
    MAX_FOLLOW_UPS,
    MAX_RENDERED_STRATEGIES,
    MAX_RESOURCE_GROUPS,
    MAX_RESOURCE_LINES,
)
from solace.extraction.classifier import (
    RESOURCE_PREVENTIVE,
    URGENCY_HIGH,
    URGENCY_MEDIUM,
    NeedsAssessment,
)


@dataclass(frozen=True)
class CopingStrategy:
    name: str
    description: str
    technique: str
    immediacy: str  # immediate, short-term, long-term


@dataclass(frozen=True)
class ResourceGroup:
    kind: str
    description: str
    resources: Tuple[str, ...]


COPING_STRATEGIES = {
    "anxiety": [
        CopingStrategy("Deep Breathing Exercise", "Take slow, deep breaths. Inhale for 4 counts, hold for 4, exhale for 6.", "breathing", "immediate"),
        CopingStrategy("5-4-3-2-1 Grounding", "Name 5 things you see, 4 you can touch, 3 you hear, 2 you smell, 1 you taste.", "grounding", "immediate"),
        CopingStrategy("Progressive Muscle Relaxation", "Tense and then relax each muscle group in your body, starting from your toes.", "relaxation", "short-term"),
    ],
    "depression": [
        CopingStrategy("Gentle Movement", "Take a short walk, do light stretching, or try gentle yoga.", "physical", "immediate"),
        CopingStrategy("Behavioral Activation", "Do one small, meaningful activity that you used to enjoy.", "behavioral", "short-term"),
        CopingStrategy("Gratitude Practice", "Write down three things you're grateful for, no matter how small.", "cognitive", "immediate"),
    ],
    "stress": [
        CopingStrategy("Time Management", "Break large tasks into smaller, manageable steps.", "organizational", "short-term"),
        CopingStrategy("Mindful Meditation", "Spend 5-10 minutes focusing on your breath and the present moment.", "mindfulness", "immediate"),
        CopingStrategy("Social Support", "Reach out to a trusted friend, family member, or counselor.", "social", "immediate"),
    ],
    "general": [
        CopingStrategy("Journaling", "Write down your thoughts and feelings to help process them.", "expressive", "immediate"),
        CopingStrategy("Self-Compassion", "Treat yourself with the same kindness you'd show a good friend.", "cognitive", "immediate"),
        CopingStrategy("Routine Building", "Establish small, consistent daily routines to create stability.", "behavioral", "long-term"),
    ],
}

PROFESSIONAL_RESOURCES = {
    "immediate": [
        ResourceGroup("Crisis Counseling", "Immediate professional support for crisis situations", (
            "988 Suicide & Crisis Lifeline: call or text 988",
            "Crisis Text Line: text HOME to 741741",
            "Local Emergency Services: 911",
        )),
    ],
    "therapy": [
        ResourceGroup("Individual Therapy", "One-on-one counseling with a licensed mental health professional", (
            "Psychology Today therapist finder",
            "Campus counseling center",
            "Community mental health centers",
            "Employee Assistance Programs (EAP)",
        )),
        ResourceGroup("Group Therapy", "Therapeutic support in a group setting with peers", (
            "Support groups through NAMI",
            "Campus group counseling",
            "Community support groups",
        )),
    ],
    "specialized": [
        ResourceGroup("Specialized Treatment", "Targeted treatment for specific mental health conditions", (
            "Anxiety and depression treatment centers",
            "Eating disorder treatment programs",
            "Trauma-informed therapy specialists",
            "Substance use counseling",
        )),
    ],
    "preventive": [
        ResourceGroup("Wellness Resources", "Preventive mental health and wellness support", (
            "Campus wellness programs",
            "Mindfulness and meditation apps",
            "Peer support programs",
            "Wellness workshops and seminars",
        )),
    ],
}

VALIDATION_LINES = {
    "validation": [
        "Your feelings are completely valid and understandable.",
        "It makes sense that you're feeling this way given what you're going through.",
        "Thank you for sharing something so personal with me.",
        "What you're experiencing is more common than you might think.",
    ],
    "normalization": [
        "Many people experience similar feelings, especially during stressful times.",
        "It's normal to feel overwhelmed when dealing with multiple challenges.",
        "These feelings are a natural response to difficult circumstances.",
        "You're not alone in feeling this way.",
    ],
    "hope": [
        "These difficult feelings are temporary, even though they feel overwhelming right now.",
        "With the right support and strategies, things can improve.",
        "You've shown strength by reaching out and talking about this.",
    ],
    "empowerment": [
        "You have more strength than you realize.",
        "You've overcome challenges before, and you can get through this too.",
        "Seeking help is a sign of courage, not weakness.",
    ],
}

FOLLOW_UPS = {
    "coping": "Would you like to try one of these techniques together?",
    "professional": "Would you like help finding professional support in your area?",
    "loneliness": "Would you like to talk about ways to connect with others?",
    "stress": "Would you like to explore stress management strategies?",
}

VALIDATION_INDICATORS = [
    "valid", "understand", "makes sense", "normal", "common",
    "not alone", "thank you for sharing",
]

COPING_INDICATORS = [
    "try", "technique", "techniques", "strategy", "strategies", "breathe",
    "exercise", "exercises", "practice", "meditation", "grounding",
]

# Whole words only: "try" must not match "country" or "entry"
COPING_PATTERN = re.compile(r"\b(" + "|".join(re.escape(i) for i in COPING_INDICATORS) + r")\b")

PROFESSIONAL_INDICATORS = [
    "therapist", "counselor", "professional", "therapy",
    "treatment", "psychiatrist",
]

IMMEDIACY_BY_URGENCY = {
    URGENCY_HIGH: ("immediate",),
    URGENCY_MEDIUM: ("immediate", "short-term"),
}
ALL_IMMEDIACY = ("immediate", "short-term", "long-term")


@dataclass(frozen=True)
class EnhancementBundle:
    validation_line: Optional[str] = None
    coping_strategies: Tuple[CopingStrategy, ...] = ()
    professional_resources: Tuple[ResourceGroup, ...] = ()
    follow_ups: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.validation_line or self.coping_strategies or self.professional_resources)

    def to_dict(self):
        return {
            "validation": self.validation_line,
            "coping_strategies": [
                {"name": s.name, "description": s.description, "immediacy": s.immediacy}
                for s in self.coping_strategies
            ],
            "professional_resources": [
                {"type": g.kind, "description": g.description, "resources": list(g.resources)}
                for g in self.professional_resources
            ],
            "follow_up_suggestions": list(self.follow_ups),
        }


def _catalog_lines(groups) -> List[str]:
    lines = []
    for group_list in groups.values():
        for group in group_list:
            lines.append(group.description.lower())
            lines.extend(r.lower() for r in group.resources)
    return lines


ALL_VALIDATION_LINES = [line.lower() for lines in VALIDATION_LINES.values() for line in lines]
ALL_RESOURCE_LINES = _catalog_lines(PROFESSIONAL_RESOURCES)
ALL_STRATEGY_NAMES = [s.name.lower() for group in COPING_STRATEGIES.values() for s in group]


class ContextEnhancer:
    """
    Adds mental health context to generated replies.

    - Validation line prepended when emotions or an explicit help request are present
    - Up to 3 coping strategies (2 rendered), filtered by urgency immediacy
    - One professional resource group (3 lines) keyed by resource type
    - Up to 2 follow-up suggestions, returned as metadata only
    """

    def __init__(self, rng: Optional[random.Random] = None):
        # Without an injected RNG the validation line is seeded by the reply text
        self.rng = rng

    def enhance(
        self,
        raw_text: str,
        emotions: FrozenSet[str],
        needs: NeedsAssessment
    ) -> Tuple[EnhancementBundle, str]:
        bundle = self.build_bundle(raw_text, emotions, needs)
        return bundle, self.apply_bundle(raw_text, bundle)

    # =========================================================================
    # BUNDLE CONSTRUCTION
    # =========================================================================
    def build_bundle(
        self,
        raw_text: str,
        emotions: FrozenSet[str],
        needs: NeedsAssessment
    ) -> EnhancementBundle:
        text_lower = (raw_text or "").lower()

        validation_line = None
        if (emotions or needs.has_explicit_help_request) and not self.contains_validation(text_lower):
            validation_line = self.get_validation_line(emotions, raw_text or "")

        strategies = ()
        if needs.needs_coping and not self.contains_coping_advice(text_lower):
            strategies = tuple(self.get_coping_strategies(emotions, needs.urgency))

        resources = ()
        if needs.needs_professional_help and not self.contains_professional_recommendation(text_lower):
            resources = tuple(self.get_professional_resources(needs.resource_type))

        return EnhancementBundle(
            validation_line=validation_line,
            coping_strategies=strategies,
            professional_resources=resources,
            follow_ups=tuple(self.get_follow_ups(emotions, needs))
        )

    def get_validation_line(self, emotions: FrozenSet[str], seed_text: str) -> str:
        kinds = ["validation", "normalization"]
        if "depression" in emotions or "loneliness" in emotions:
            kinds.append("hope")
        if "anxiety" in emotions or "stress" in emotions:
            kinds.append("empowerment")

        rng = self.rng or random.Random(zlib.crc32(seed_text.encode("utf-8")))
        lines = VALIDATION_LINES[rng.choice(kinds)]
        return rng.choice(lines)

    def get_coping_strategies(self, emotions: FrozenSet[str], urgency: str) -> List[CopingStrategy]:
        candidates = []
        # Sorted so the same emotions always yield the same strategies
        for emotion in sorted(emotions):
            candidates.extend(COPING_STRATEGIES.get(emotion, []))
        if not candidates:
            candidates.extend(COPING_STRATEGIES["general"])

        allowed = IMMEDIACY_BY_URGENCY.get(urgency, ALL_IMMEDIACY)

        unique = []
        seen = set()
        for strategy in candidates:
            if strategy.immediacy not in allowed or strategy.name in seen:
                continue
            seen.add(strategy.name)
            unique.append(strategy)

        return unique[:MAX_COPING_STRATEGIES]

    def get_professional_resources(self, resource_type: str) -> List[ResourceGroup]:
        groups = PROFESSIONAL_RESOURCES.get(resource_type) or PROFESSIONAL_RESOURCES[RESOURCE_PREVENTIVE]
        return [
            ResourceGroup(g.kind, g.description, g.resources[:MAX_RESOURCE_LINES])
            for g in groups[:MAX_RESOURCE_GROUPS]
        ]

    def get_follow_ups(self, emotions: FrozenSet[str], needs: NeedsAssessment) -> List[str]:
        suggestions = []
        if needs.needs_coping:
            suggestions.append(FOLLOW_UPS["coping"])
        if needs.needs_professional_help:
            suggestions.append(FOLLOW_UPS["professional"])
        if "loneliness" in emotions:
            suggestions.append(FOLLOW_UPS["loneliness"])
        if "stress" in emotions:
            suggestions.append(FOLLOW_UPS["stress"])
        return suggestions[:MAX_FOLLOW_UPS]

    # =========================================================================
    # RENDERING
    # =========================================================================
    def apply_bundle(self, raw_text: str, bundle: EnhancementBundle) -> str:
        text = raw_text or ""

        if bundle.validation_line:
            text = f"{bundle.validation_line} {text}".strip()

        if bundle.coping_strategies:
            text += "\n\n" + self.format_coping_strategies(bundle.coping_strategies[:MAX_RENDERED_STRATEGIES])

        if bundle.professional_resources:
            text += "\n\n" + self.format_professional_resources(bundle.professional_resources[0])

        return text

    def format_coping_strategies(self, strategies) -> str:
        intro = (
            "Here's a technique that might help:" if len(strategies) == 1
            else "Here are some techniques that might help:"
        )
        lines = "\n".join(f"• {s.name}: {s.description}" for s in strategies)
        return f"{intro}\n{lines}"

    def format_professional_resources(self, group: ResourceGroup) -> str:
        lines = "\n".join(f"• {r}" for r in group.resources[:MAX_RESOURCE_LINES])
        return f"{group.kind}: {group.description}\n{lines}"

    # =========================================================================
    # IDEMPOTENCE CHECKS
    # =========================================================================
    def contains_validation(self, text_lower: str) -> bool:
        return (
            any(i in text_lower for i in VALIDATION_INDICATORS)
            or any(line in text_lower for line in ALL_VALIDATION_LINES)
        )

    def contains_coping_advice(self, text_lower: str) -> bool:
        return (
            bool(COPING_PATTERN.search(text_lower))
            or any(name in text_lower for name in ALL_STRATEGY_NAMES)
        )

    def contains_professional_recommendation(self, text_lower: str) -> bool:
        return (
            any(i in text_lower for i in PROFESSIONAL_INDICATORS)
            or any(line in text_lower for line in ALL_RESOURCE_LINES)
        )
