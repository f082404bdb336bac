"""
Safety Checker - CRITICAL SAFETY MODULE
Evaluates user text for crisis indicators before any generation call.

Detection is lexical: a case-insensitive substring match against tiered
keyword sets. It is a safety net, not a clinical assessment.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from config import DEFAULT_LANGUAGE


SEVERITY_NONE = "none"
SEVERITY_MODERATE = "moderate"
SEVERITY_CRITICAL = "critical"

SEVERITY_RANK = {
    SEVERITY_NONE: 0,
    SEVERITY_MODERATE: 1,
    SEVERITY_CRITICAL: 2,
}

# Explicit suicide and self-harm phrasing
CRITICAL_KEYWORDS = (
    "suicide", "suicidal", "kill myself", "end my life", "take my life",
    "want to die", "wanna die", "going to die", "planning to die", "ready to die",
    "better off dead", "wish i was dead", "wish i were dead",
    "hurt myself", "harm myself", "cut myself", "cutting myself",
    "self harm", "self-harm", "burning myself", "hitting myself", "starving myself",
    "overdose", "jump off", "hang myself", "shoot myself",
    "end it all", "unalive myself", "don't want to live", "dont want to live",
)

# Hopelessness and despair phrasing
MODERATE_KEYWORDS = (
    "hopeless", "no hope", "lost all hope", "worthless",
    "can't go on", "cant go on", "can't take it anymore", "can't do this anymore",
    "no point living", "no point in living", "no reason to live", "nothing to live for",
    "life is meaningless", "give up on life", "giving up on life",
    "no way out", "trapped", "disappear forever", "burden to everyone",
    "no one would miss me", "nobody would miss me", "tired of living",
)


@dataclass(frozen=True)
class CrisisAssessment:
    matched: bool
    severity: str = SEVERITY_NONE
    matched_keywords: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_critical(self) -> bool:
        return self.severity == SEVERITY_CRITICAL


@dataclass(frozen=True)
class CrisisResource:
    name: str
    contact: str
    availability: str
    kind: str
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "contact": self.contact,
            "availability": self.availability,
            "kind": self.kind,
            "description": self.description,
        }


CRISIS_RESOURCES = {
    "en": [
        CrisisResource(
            name="988 Suicide & Crisis Lifeline",
            contact="Call or text 988",
            availability="24/7",
            kind="emergency",
            description="Free and confidential support for people in suicidal crisis or emotional distress",
        ),
        CrisisResource(
            name="Crisis Text Line",
            contact="Text HOME to 741741",
            availability="24/7",
            kind="emergency",
            description="Free crisis support via text message",
        ),
        CrisisResource(
            name="Emergency Services",
            contact="911",
            availability="24/7",
            kind="emergency",
            description="If you are in immediate danger",
        ),
        CrisisResource(
            name="SAMHSA National Helpline",
            contact="1-800-662-4357",
            availability="24/7",
            kind="counseling",
            description="Treatment referral and information for mental health and substance use",
        ),
        CrisisResource(
            name="NAMI Helpline",
            contact="1-800-950-6264",
            availability="Mon-Fri 10am-10pm ET",
            kind="peer-support",
            description="Support and education for people affected by mental illness",
        ),
    ],
    "mr": [
        CrisisResource(
            name="राष्ट्रीय आत्महत्या प्रतिबंध हेल्पलाइन",
            contact="988",
            availability="२४/७",
            kind="emergency",
            description="२४/७ संकट सहाय्य",
        ),
        CrisisResource(
            name="संकट मजकूर लाइन",
            contact="741741",
            availability="२४/७",
            kind="emergency",
            description="संकट सहाय्यासाठी HOME मजकूर पाठवा",
        ),
    ],
}

CRISIS_MESSAGES = {
    SEVERITY_CRITICAL: (
        "I'm very concerned about what you're sharing. Your safety is the most important "
        "thing right now. Please reach out for immediate help:\n\n"
        "• 988 Suicide & Crisis Lifeline: call or text 988\n"
        "• Crisis Text Line: text HOME to 741741\n"
        "• If you are in immediate danger, call 911\n\n"
        "You don't have to go through this alone. There are people who want to help you right now."
    ),
    SEVERITY_MODERATE: (
        "I hear how much pain you're in right now, and I'm glad you told me. These feelings "
        "are a signal that you deserve more support than I can give on my own:\n\n"
        "• 988 Suicide & Crisis Lifeline: call or text 988 (24/7)\n"
        "• Crisis Text Line: text HOME to 741741\n\n"
        "You're not alone in this, and these feelings can change with help. Are you somewhere safe right now?"
    ),
}

ESCALATION_NOTES = {
    3: "This sounds like an emergency. Please contact emergency services or go to your nearest emergency room now.",
    2: "I'm noticing a pattern of painful thoughts in our conversation. Please reach out to a crisis counselor today.",
}


class CrisisDetector:
    """
    Evaluates user input for crisis indicators.

    CRITICAL: False negatives (missing a crisis) are much worse than false
    positives. Keyword tiers can be replaced but never bypassed: assess()
    has no dependencies and cannot fail on upstream outages.
    """

    def __init__(
        self,
        critical_keywords: Optional[Iterable[str]] = None,
        moderate_keywords: Optional[Iterable[str]] = None
    ):
        critical = critical_keywords if critical_keywords is not None else CRITICAL_KEYWORDS
        moderate = moderate_keywords if moderate_keywords is not None else MODERATE_KEYWORDS
        # Ordered highest tier first
        self.tiers = [
            (SEVERITY_CRITICAL, tuple(k.lower() for k in critical)),
            (SEVERITY_MODERATE, tuple(k.lower() for k in moderate)),
        ]

    def assess(self, text: str) -> CrisisAssessment:
        """
        Evaluate text for crisis indicators.

        Args:
            text: Raw user message

        Returns:
            CrisisAssessment with the highest matched tier
        """
        if not text or not isinstance(text, str):
            return CrisisAssessment(matched=False)

        text_lower = text.lower()
        matched = set()
        severity = SEVERITY_NONE

        for tier, keywords in self.tiers:
            found = [k for k in keywords if k in text_lower]
            if found:
                matched.update(found)
                if SEVERITY_RANK[tier] > SEVERITY_RANK[severity]:
                    severity = tier

        return CrisisAssessment(
            matched=bool(matched),
            severity=severity,
            matched_keywords=frozenset(matched)
        )

    def get_crisis_resources(
        self,
        severity: str = SEVERITY_CRITICAL,
        language: str = DEFAULT_LANGUAGE
    ) -> List[CrisisResource]:
        """Get crisis resources for a severity, localized where available."""
        resources = CRISIS_RESOURCES.get(language) or CRISIS_RESOURCES[DEFAULT_LANGUAGE]

        if severity == SEVERITY_CRITICAL:
            return [r for r in resources if r.kind == "emergency"]
        if severity == SEVERITY_MODERATE:
            return [r for r in resources if r.kind in ("emergency", "counseling")]
        return [r for r in resources if r.kind != "emergency"][:3]

    def build_crisis_message(self, assessment: CrisisAssessment, escalation_level: int = 0) -> str:
        """Fixed crisis response text. Never generated upstream."""
        message = CRISIS_MESSAGES.get(assessment.severity, CRISIS_MESSAGES[SEVERITY_CRITICAL])

        if escalation_level >= 3:
            message += "\n\n" + ESCALATION_NOTES[3]
        elif escalation_level >= 2:
            message += "\n\n" + ESCALATION_NOTES[2]

        return message
