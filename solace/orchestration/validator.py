"""
Response Validator
Checks generated replies for safety and appropriateness before they are shown.
"""
import re
from dataclasses import dataclass, field
from typing import List

from config import EMPATHY_CHECK_MIN_LENGTH, MAX_RESPONSE_LENGTH, MIN_RESPONSE_LENGTH


HARMFUL_PHRASES = [
    "just get over it", "think positive", "others have it worse",
    "you're being dramatic", "it's all in your head", "snap out of it",
    "kill yourself", "you should die",
]

MEDICAL_ADVICE_PATTERNS = [
    re.compile(r"\b(diagnose|prescribe|you should take)\b", re.IGNORECASE),
    re.compile(r"\b(you have|you are suffering from|you suffer from)\s+(depression|anxiety|bipolar|adhd|ptsd|ocd)\b", re.IGNORECASE),
]

EMPATHY_INDICATORS = [
    # Direct empathy
    "understand", "hear", "feel", "sorry", "empathy", "compassion",
    # Validation
    "valid", "makes sense", "sounds like", "natural", "normal", "common", "okay",
    # Support
    "help", "support", "care", "listen", "here", "with you", "not alone",
    # Acknowledgment
    "difficult", "challenging", "tough", "hard", "struggle", "dealing with", "going through",
    # Encouragement
    "brave", "courage", "strength", "strong", "capable", "resilient", "hope",
    # Engagement
    "sharing", "telling", "opening up", "reaching out", "talking", "expressing",
    # Appreciation
    "thank", "appreciate", "glad", "important", "matter", "value",
    # Gentle language
    "might", "could", "perhaps", "maybe", "sometimes", "try", "consider",
]

ENGAGEMENT_PATTERN = re.compile(r"\b(tell me|share|how are|what's|would you|can you|have you)\b", re.IGNORECASE)


@dataclass
class ValidationResult:
    is_appropriate: bool
    issues: List[str] = field(default_factory=list)
    has_empathy: bool = False
    has_harmful_content: bool = False
    length: int = 0

    def to_dict(self):
        return {
            "is_appropriate": self.is_appropriate,
            "issues": list(self.issues),
            "has_empathy": self.has_empathy,
            "has_harmful_content": self.has_harmful_content,
            "length": self.length,
        }


class ResponseValidator:
    """
    Validates reply text. Never blocks: issues are reported and callers
    decide whether to keep, replace or fall back.
    """

    def __init__(
        self,
        min_length: int = MIN_RESPONSE_LENGTH,
        max_length: int = MAX_RESPONSE_LENGTH,
        empathy_min_length: int = EMPATHY_CHECK_MIN_LENGTH,
        harmful_phrases: List[str] = None
    ):
        self.min_length = min_length
        self.max_length = max_length
        self.empathy_min_length = empathy_min_length
        self.harmful_phrases = [p.lower() for p in (harmful_phrases or HARMFUL_PHRASES)]

    def validate(self, text: str) -> ValidationResult:
        if not text or not isinstance(text, str):
            return ValidationResult(is_appropriate=False, issues=["Empty or invalid response"])

        issues = []
        text_lower = text.lower()

        harmful = [p for p in self.harmful_phrases if p in text_lower]
        for phrase in harmful:
            issues.append(f'Contains potentially harmful phrase: "{phrase}"')

        for pattern in MEDICAL_ADVICE_PATTERNS:
            if pattern.search(text):
                issues.append("Contains medical advice or diagnosis")
                break

        has_empathy = any(indicator in text_lower for indicator in EMPATHY_INDICATORS)
        has_engagement = "?" in text or bool(ENGAGEMENT_PATTERN.search(text))

        if len(text) > self.empathy_min_length and not has_empathy and not has_engagement:
            issues.append("Response may lack empathetic language or engagement")

        if len(text) < self.min_length:
            issues.append("Response may be too brief for mental health context")

        if len(text) > self.max_length:
            issues.append(f"Response too long (over {self.max_length} characters)")

        return ValidationResult(
            is_appropriate=not issues,
            issues=issues,
            has_empathy=has_empathy,
            has_harmful_content=bool(harmful),
            length=len(text)
        )
