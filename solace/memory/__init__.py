"""
Solace Memory Module
Per-session conversational context
"""

from .session_store import InMemorySessionStore, Session, SessionStore, Turn

__all__ = ['SessionStore', 'InMemorySessionStore', 'Session', 'Turn']
