"""
Escalation Tracker
Tracks repeated crisis signals within a session over a sliding time window.
"""
import time
from typing import Dict, Optional

from config import ESCALATION_WINDOW_SECONDS
from solace.utils.safety_checker import SEVERITY_CRITICAL, SEVERITY_MODERATE


class EscalationTracker:
    """
    Computes an escalation level (0-3) for a session from its recent crisis
    events.

    Level 3: any critical event in the window
    Level 2: two or more moderate events in the window
    Level 1: a single moderate event

    Within the window the level never drops; once every event has aged out
    the session starts again from 0.
    """

    def __init__(self, window_seconds: float = ESCALATION_WINDOW_SECONDS):
        self.window_seconds = window_seconds

    def record(self, session, severity: str, now: Optional[float] = None) -> int:
        """
        Record a crisis event on the session and return its escalation level.

        Args:
            session: Session owning the crisis_events list
            severity: Severity of the new event
            now: Event time (epoch seconds)
        """
        now = time.time() if now is None else now
        cutoff = now - self.window_seconds

        recent = [(ts, sev) for ts, sev in session.crisis_events if ts > cutoff]
        if not recent:
            session.escalation_level = 0

        recent.append((now, severity))
        session.crisis_events = recent

        level = self._level_for(self._count(recent))
        session.escalation_level = max(session.escalation_level, level)
        return session.escalation_level

    def _count(self, events) -> Dict[str, int]:
        counts = {SEVERITY_CRITICAL: 0, SEVERITY_MODERATE: 0}
        for _, severity in events:
            if severity in counts:
                counts[severity] += 1
        return counts

    def _level_for(self, counts: Dict[str, int]) -> int:
        if counts[SEVERITY_CRITICAL] >= 1:
            return 3
        if counts[SEVERITY_MODERATE] >= 2:
            return 2
        if counts[SEVERITY_MODERATE] >= 1:
            return 1
        return 0
