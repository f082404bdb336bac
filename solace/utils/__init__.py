"""
Solace Utilities
Crisis detection, escalation tracking and privacy redaction
"""

from .escalation import EscalationTracker
from .privacy import PrivacyFilter
from .safety_checker import CrisisAssessment, CrisisDetector, CrisisResource

__all__ = ['CrisisDetector', 'CrisisAssessment', 'CrisisResource', 'EscalationTracker', 'PrivacyFilter']
