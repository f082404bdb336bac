"""
Privacy Filter
Redacts personal identifiers before text leaves the process or enters a session.
"""
import re
from typing import Tuple


class PrivacyFilter:
    """
    Replaces emails, phone numbers and long digit runs (card or ID numbers)
    with placeholders. Patterns are ordered; earlier redactions win.
    """

    def __init__(self):
        self.patterns = [
            (re.compile(r'\b[\w.+-]+@[\w-]+\.[\w.-]+\b'), "[email]"),
            (re.compile(r'(?<!\w)(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b'), "[phone]"),
            (re.compile(r'\b\d{9,19}\b'), "[number]"),
        ]

    def anonymize(self, text: str) -> Tuple[str, bool]:
        """
        Redact personal identifiers.

        Returns:
            (anonymized text, whether anything was redacted)
        """
        if not text:
            return text, False

        detected = False
        for pattern, placeholder in self.patterns:
            text, count = pattern.subn(placeholder, text)
            detected = detected or count > 0

        return text, detected
