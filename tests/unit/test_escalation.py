"""Tests for per-session crisis escalation tracking."""

from solace.memory.session_store import Session
from solace.utils.escalation import EscalationTracker
from solace.utils.safety_checker import SEVERITY_CRITICAL, SEVERITY_MODERATE


class TestEscalationTracker:
    """Tests for EscalationTracker.record."""

    def test_single_moderate_is_level_one(self):
        session = Session(id="s1")
        assert EscalationTracker().record(session, SEVERITY_MODERATE, now=1000.0) == 1
        assert session.escalation_level == 1
        assert len(session.crisis_events) == 1

    def test_repeated_moderate_is_level_two(self):
        tracker = EscalationTracker()
        session = Session(id="s1")
        tracker.record(session, SEVERITY_MODERATE, now=1000.0)
        assert tracker.record(session, SEVERITY_MODERATE, now=1010.0) == 2

    def test_any_critical_is_level_three(self):
        assert EscalationTracker().record(Session(id="s1"), SEVERITY_CRITICAL, now=1000.0) == 3

    def test_level_never_drops_within_window(self):
        tracker = EscalationTracker(window_seconds=600)
        session = Session(id="s1")
        tracker.record(session, SEVERITY_CRITICAL, now=1000.0)
        assert tracker.record(session, SEVERITY_MODERATE, now=1100.0) == 3

    def test_events_outside_window_are_forgotten(self):
        tracker = EscalationTracker(window_seconds=600)
        session = Session(id="s1")
        tracker.record(session, SEVERITY_CRITICAL, now=1000.0)
        assert tracker.record(session, SEVERITY_MODERATE, now=1000.0 + 601) == 1
        assert len(session.crisis_events) == 1
