"""
Solace Orchestrator
Runs one user utterance through crisis detection, generation, validation and
enhancement, then commits the exchange to the session.

Request states:
    received -> crisis_check -> crisis_terminal
    received -> crisis_check -> generating -> retrying(n) -> validated -> enhanced -> completed
"""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set

from config import CRISIS_SINK_TIMEOUT, DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from solace.errors import InputError
from solace.extraction.classifier import Classifier, KeywordClassifier
from solace.llm.fallback import safe_response
from solace.llm.generation_client import GenerationClient
from solace.llm.prompts import bound_prompt
from solace.memory.session_store import ROLE_ASSISTANT, ROLE_USER, InMemorySessionStore, SessionStore, Turn
from solace.orchestration.enhancer import ContextEnhancer
from solace.orchestration.validator import ResponseValidator
from solace.utils.escalation import EscalationTracker
from solace.utils.privacy import PrivacyFilter
from solace.utils.safety_checker import CrisisAssessment, CrisisDetector


logger = logging.getLogger(__name__)


# =============================================================================
# CRISIS SINK
# =============================================================================
@dataclass(frozen=True)
class CrisisAlert:
    session_id: str
    severity: str
    matched_keywords: FrozenSet[str]
    timestamp: float
    escalation_level: int = 0


class CrisisSink(ABC):
    """External alerting collaborator notified on every crisis detection."""

    @abstractmethod
    async def emit(self, alert: CrisisAlert) -> None:
        """Deliver an alert. May raise; the orchestrator absorbs failures."""


class LoggingCrisisSink(CrisisSink):
    """Writes crisis alerts to the log with a truncated session id."""

    async def emit(self, alert: CrisisAlert) -> None:
        logger.warning(
            f"[CRISIS DETECTED] Session: {alert.session_id[:8]}..., "
            f"Severity: {alert.severity}, Escalation: {alert.escalation_level}, "
            f"Keywords: {len(alert.matched_keywords)}"
        )


# =============================================================================
# RESULT
# =============================================================================
@dataclass
class ProcessedMessage:
    text: str
    is_crisis: bool
    session_id: str
    language: str = DEFAULT_LANGUAGE
    crisis_resources: Optional[List[Dict[str, str]]] = None
    enhancements: Optional[Dict[str, Any]] = None
    severity: str = "none"
    escalation_level: int = 0
    emotions: List[str] = field(default_factory=list)
    needs: Optional[Dict[str, Any]] = None
    validation_issues: List[str] = field(default_factory=list)
    fallback_used: bool = False
    pii_detected: bool = False
    states: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "isCrisis": self.is_crisis,
            "crisisResources": self.crisis_resources,
            "enhancements": self.enhancements,
            "sessionId": self.session_id,
            "language": self.language,
            "severity": self.severity,
            "escalationLevel": self.escalation_level,
            "emotions": self.emotions,
            "needs": self.needs,
            "validationIssues": self.validation_issues,
            "fallbackUsed": self.fallback_used,
            "piiDetected": self.pii_detected,
        }


# =============================================================================
# ORCHESTRATOR
# =============================================================================
class SolaceOrchestrator:
    """
    Composes the support pipeline.

    - Crisis detection always runs first and never touches the network
    - Generation failures are absorbed by the generation client
    - Validation issues are logged, never fatal
    - Each completed request commits exactly one user and one assistant turn
    - Requests for the same session are serialized; other sessions run freely
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        classifier: Optional[Classifier] = None,
        store: Optional[SessionStore] = None,
        crisis_detector: Optional[CrisisDetector] = None,
        validator: Optional[ResponseValidator] = None,
        enhancer: Optional[ContextEnhancer] = None,
        crisis_sink: Optional[CrisisSink] = None,
        privacy_filter: Optional[PrivacyFilter] = None,
        escalation_tracker: Optional[EscalationTracker] = None,
        debug_mode: bool = False
    ):
        self.generation_client = generation_client
        self.classifier = classifier or KeywordClassifier()
        self.store = store or InMemorySessionStore()
        self.crisis_detector = crisis_detector or CrisisDetector()
        self.validator = validator or ResponseValidator()
        self.enhancer = enhancer or ContextEnhancer()
        self.crisis_sink = crisis_sink
        self.privacy_filter = privacy_filter or PrivacyFilter()
        self.escalation_tracker = escalation_tracker or EscalationTracker()
        self.debug_mode = debug_mode

        # Alert deliveries still in flight
        self._pending_alerts: Set[asyncio.Task] = set()

        self.stats = {
            "messages_processed": 0,
            "crisis_responses": 0,
            "fallback_responses": 0,
            "unsafe_replies_replaced": 0,
            "enhancements_dropped": 0,
            "alert_failures": 0,
        }

    async def process_message(
        self,
        session_id: str,
        text: str,
        language: str = DEFAULT_LANGUAGE
    ) -> ProcessedMessage:
        """
        Process one user utterance.

        Args:
            session_id: Opaque session identifier
            text: User message
            language: Preferred response language code

        Returns:
            ProcessedMessage with non-empty text

        Raises:
            InputError: Empty or non-string text, or empty session id
        """
        self._validate_input(session_id, text)
        if language not in SUPPORTED_LANGUAGES:
            self._log_warning("LANGUAGE", f"Unsupported language {language!r}, using {DEFAULT_LANGUAGE}")
            language = DEFAULT_LANGUAGE

        async with self.store.lock_for(session_id):
            states = ["received"]
            session = self.store.get_or_create(session_id)
            self._log_step("INPUT", f"Session {session_id[:8]}... turn {session.total_turns // 2 + 1}")

            message, pii_detected = self.privacy_filter.anonymize(text.strip())
            if pii_detected:
                self._log_warning("PRIVACY", "Personal identifiers redacted before processing")

            states.append("crisis_check")
            assessment = self.crisis_detector.assess(message)

            if assessment.matched:
                result = self._handle_crisis(session, assessment, language, states)
            else:
                result = await self._handle_generation(session_id, message, language, states)

            result.pii_detected = pii_detected
            self.store.append(
                session_id,
                Turn(role=ROLE_USER, content=message),
                Turn(role=ROLE_ASSISTANT, content=result.text)
            )
            self.stats["messages_processed"] += 1
            return result

    def clear_session(self, session_id: str) -> bool:
        """Forget a session's turns and crisis history."""
        cleared = self.store.clear(session_id)
        if cleared:
            self._log_step("SESSION", f"Cleared session {session_id[:8]}...")
        return cleared

    # =========================================================================
    # CRISIS PATH
    # =========================================================================
    def _handle_crisis(
        self,
        session,
        assessment: CrisisAssessment,
        language: str,
        states: List[str]
    ) -> ProcessedMessage:
        level = self.escalation_tracker.record(session, assessment.severity)
        self._log_warning(
            "SAFETY",
            f"CRISIS DETECTED (severity: {assessment.severity}, escalation: {level})"
        )

        text = self.crisis_detector.build_crisis_message(assessment, level)
        resources = self.crisis_detector.get_crisis_resources(assessment.severity, language)

        self._dispatch_alert(CrisisAlert(
            session_id=session.id,
            severity=assessment.severity,
            matched_keywords=assessment.matched_keywords,
            timestamp=time.time(),
            escalation_level=level
        ))

        states.append("crisis_terminal")
        self.stats["crisis_responses"] += 1
        return ProcessedMessage(
            text=text,
            is_crisis=True,
            session_id=session.id,
            language=language,
            crisis_resources=[r.to_dict() for r in resources],
            severity=assessment.severity,
            escalation_level=level,
            states=states
        )

    def _dispatch_alert(self, alert: CrisisAlert):
        if self.crisis_sink is None:
            return
        task = asyncio.get_running_loop().create_task(self._deliver_alert(alert))
        self._pending_alerts.add(task)
        task.add_done_callback(self._pending_alerts.discard)

    async def _deliver_alert(self, alert: CrisisAlert):
        try:
            await asyncio.wait_for(self.crisis_sink.emit(alert), timeout=CRISIS_SINK_TIMEOUT)
        except asyncio.TimeoutError:
            self.stats["alert_failures"] += 1
            logger.error(f"[CrisisSink] Alert delivery timed out for session {alert.session_id[:8]}...")
        except Exception as e:
            self.stats["alert_failures"] += 1
            logger.error(f"[CrisisSink] Alert delivery failed for session {alert.session_id[:8]}...: {e!r}")

    # =========================================================================
    # GENERATION PATH
    # =========================================================================
    async def _handle_generation(
        self,
        session_id: str,
        message: str,
        language: str,
        states: List[str]
    ) -> ProcessedMessage:
        history = self.store.recent_turns(session_id)

        states.append("generating")
        self._log_step("GENERATION", f"Calling backend with {len(history)} turn(s) of history")
        generation = await self.generation_client.generate(bound_prompt(message), history, language)

        retries = max(0, generation.attempt_count - 1)
        if retries:
            states.append(f"retrying({retries})")
        if generation.fallback_used:
            self.stats["fallback_responses"] += 1
            self._log_warning("GENERATION", "Backend unavailable, using fallback reply")

        raw = generation.text
        raw_check = self.validator.validate(raw)
        issues = list(raw_check.issues)
        if raw_check.has_harmful_content:
            self._log_warning("VALIDATION", f"Unsafe reply replaced: {raw_check.issues}")
            self.stats["unsafe_replies_replaced"] += 1
            raw = safe_response(message)
            raw_check = self.validator.validate(raw)
        elif issues:
            self._log_debug("VALIDATION", f"Accepted with issues: {issues}")
        states.append("validated")

        emotions, needs = await self.classifier.classify(message, history)
        self._log_debug("CLASSIFIER", f"Emotions: {sorted(emotions)} | Urgency: {needs.urgency}")

        bundle, enhanced = self.enhancer.enhance(raw, emotions, needs)
        enhancements = bundle.to_dict()
        final = enhanced

        enhanced_check = self.validator.validate(enhanced)
        if not enhanced_check.is_appropriate and raw_check.is_appropriate:
            self._log_warning("ENHANCEMENT", f"Enhanced reply rejected: {enhanced_check.issues}")
            self.stats["enhancements_dropped"] += 1
            final = raw
            enhancements = None
        states.append("enhanced")
        states.append("completed")

        return ProcessedMessage(
            text=final,
            is_crisis=False,
            session_id=session_id,
            language=language,
            enhancements=enhancements,
            emotions=sorted(emotions),
            needs=needs.to_dict(),
            validation_issues=issues,
            fallback_used=generation.fallback_used,
            states=states
        )

    # =========================================================================
    # HELPERS
    # =========================================================================
    def _validate_input(self, session_id: Any, text: Any):
        if not isinstance(session_id, str) or not session_id.strip():
            raise InputError("A non-empty session id is required")
        if not isinstance(text, str):
            raise InputError("Invalid message provided")
        if not text.strip():
            raise InputError("Message is empty")

    async def wait_for_alerts(self):
        """Wait for in-flight crisis alert deliveries (used on shutdown)."""
        if self._pending_alerts:
            await asyncio.gather(*list(self._pending_alerts), return_exceptions=True)

    def get_session_summary(self, session_id: str) -> Optional[Dict[str, Any]]:
        session = self.store.get(session_id)
        if session is None:
            return None
        return {
            "session_id": session_id[:8] + "...",
            "created_at": session.created_at,
            "last_active_at": session.last_active_at,
            "total_turns": session.total_turns,
            "turns_in_window": len(session.turns),
            "crisis_events": len(session.crisis_events),
            "escalation_level": session.escalation_level,
        }

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            "orchestrator": dict(self.stats),
            "generation": self.generation_client.get_stats(),
            "sessions": self.store.stats() if hasattr(self.store, "stats") else {},
            "pending_alerts": len(self._pending_alerts),
        }

    def _log_step(self, step: str, message: str):
        if self.debug_mode:
            logger.info(f"[{step}] {message}")

    def _log_debug(self, category: str, message: str):
        if self.debug_mode:
            logger.debug(f"[{category}] {message}")

    def _log_warning(self, category: str, message: str):
        logger.warning(f"[{category}] {message}")
