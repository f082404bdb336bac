"""
Session Store
Per-session conversational context with a bounded turn window.

Sessions live only in process memory. They are removed explicitly, by the
TTL sweep once idle, or by LRU eviction when the store is full.
"""
import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config import MAX_SESSIONS, SESSION_TTL_SECONDS, SESSION_WINDOW, SWEEP_INTERVAL_SECONDS


logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    role: str
    content: str
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.role not in (ROLE_USER, ROLE_ASSISTANT):
            raise ValueError(f"Unknown turn role: {self.role!r}")

    def to_dict(self):
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}


@dataclass
class Session:
    id: str
    turns: List[Turn] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    last_active_at: float = field(default_factory=time.time)
    total_turns: int = 0
    # (timestamp, severity) pairs, maintained by EscalationTracker
    crisis_events: List[Tuple[float, str]] = field(default_factory=list)
    escalation_level: int = 0


class SessionStore(ABC):
    """
    Storage interface for sessions. Implementations must be safe for
    concurrent use across sessions and make each append atomic.
    """

    @abstractmethod
    def get_or_create(self, session_id: str) -> Session:
        """Return the session, creating it on first use."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        """Return the session or None."""

    @abstractmethod
    def append(self, session_id: str, *turns: Turn) -> int:
        """Append turns in order as one atomic step. Returns the lifetime turn count."""

    @abstractmethod
    def recent_turns(self, session_id: str, k: Optional[int] = None) -> List[Turn]:
        """Copy of the most recent k turns, oldest first."""

    @abstractmethod
    def clear(self, session_id: str) -> bool:
        """Drop a session. Returns whether it existed."""

    @abstractmethod
    def sweep(self, now: Optional[float] = None) -> int:
        """Drop sessions idle past the TTL. Returns how many were removed."""

    @abstractmethod
    def lock_for(self, session_id: str) -> asyncio.Lock:
        """Per-session lock used to serialize requests for one session."""


class InMemorySessionStore(SessionStore):
    """
    Session store backed by an ordered dict in LRU order.

    Features:
    - Bounded window of K turns per session
    - TTL sweep on demand or from a background task
    - LRU eviction above max_sessions
    - Per-session asyncio locks for request serialization
    """

    def __init__(
        self,
        window: int = SESSION_WINDOW,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS
    ):
        if window < 2:
            raise ValueError("window must hold at least one exchange (2 turns)")

        self.window = window
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

        self._sessions: "OrderedDict[str, Session]" = OrderedDict()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._guard = threading.RLock()
        self._sweeper: Optional[asyncio.Task] = None

        # Statistics tracking
        self.sessions_created = 0
        self.sessions_expired = 0
        self.sessions_evicted = 0

    # =========================================================================
    # LOOKUP & MUTATION
    # =========================================================================
    def get_or_create(self, session_id: str) -> Session:
        with self._guard:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                return session

            session = Session(id=session_id)
            self._sessions[session_id] = session
            self.sessions_created += 1
            self._evict_overflow(keep=session_id)
            return session

    def get(self, session_id: str) -> Optional[Session]:
        with self._guard:
            return self._sessions.get(session_id)

    def append(self, session_id: str, *turns: Turn) -> int:
        with self._guard:
            session = self.get_or_create(session_id)
            session.turns.extend(turns)
            if len(session.turns) > self.window:
                session.turns = session.turns[-self.window:]
            session.total_turns += len(turns)
            session.last_active_at = time.time()
            return session.total_turns

    def recent_turns(self, session_id: str, k: Optional[int] = None) -> List[Turn]:
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None:
                return []
            if k is None:
                return list(session.turns)
            return list(session.turns[-k:]) if k > 0 else []

    def clear(self, session_id: str) -> bool:
        with self._guard:
            existed = self._sessions.pop(session_id, None) is not None
            lock = self._locks.get(session_id)
            if lock is None or not lock.locked():
                self._locks.pop(session_id, None)
            return existed

    def lock_for(self, session_id: str) -> asyncio.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[session_id] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._sessions

    # =========================================================================
    # EXPIRY
    # =========================================================================
    def sweep(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        cutoff = now - self.ttl_seconds

        removed = 0
        with self._guard:
            expired = [sid for sid, s in self._sessions.items() if s.last_active_at < cutoff]
            for sid in expired:
                lock = self._locks.get(sid)
                if lock is not None and lock.locked():
                    # A request is in flight for this session
                    continue
                del self._sessions[sid]
                self._locks.pop(sid, None)
                self.sessions_expired += 1
                removed += 1

        if removed:
            logger.info(f"[SessionStore] Swept {removed} idle session(s)")
        return removed

    def _evict_overflow(self, keep: Optional[str] = None):
        overflow = len(self._sessions) - self.max_sessions
        if overflow <= 0:
            return

        # Oldest first; sessions with a request in flight stay until it finishes
        for sid in list(self._sessions):
            if overflow <= 0:
                break
            lock = self._locks.get(sid)
            if sid == keep or (lock is not None and lock.locked()):
                continue
            del self._sessions[sid]
            self._locks.pop(sid, None)
            self.sessions_evicted += 1
            overflow -= 1
            logger.info(f"[SessionStore] Evicted least recently used session {sid[:8]}...")

        if overflow > 0:
            logger.warning(f"[SessionStore] {overflow} session(s) over capacity, all busy")

    def start_sweeper(self, interval: float = SWEEP_INTERVAL_SECONDS) -> asyncio.Task:
        """Start the background TTL sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper

        async def _run():
            while True:
                await asyncio.sleep(interval)
                self.sweep()

        self._sweeper = asyncio.get_running_loop().create_task(_run())
        return self._sweeper

    async def stop_sweeper(self):
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    def stats(self) -> Dict[str, int]:
        with self._guard:
            return {
                "active_sessions": len(self._sessions),
                "sessions_created": self.sessions_created,
                "sessions_expired": self.sessions_expired,
                "sessions_evicted": self.sessions_evicted,
                "window": self.window,
                "max_sessions": self.max_sessions,
            }
