"""
Keyed conversation session storage.

Sessions are stored per (tenant, phone). The booking flow reads a session,
works on a copy, and saves it only after the whole message was handled, so
a failure half-way through never leaves a stored session ahead of what was
actually persisted.
"""

import logging
import threading
from typing import Optional, Protocol

from salon_booking.schemas.conversation_schema import ConversationSession

logger = logging.getLogger(__name__)

SessionKey = tuple[str, str]


class SessionStore(Protocol):
    def get(self, key: SessionKey) -> Optional[ConversationSession]: ...

    def save(self, session: ConversationSession) -> None: ...

    def delete(self, key: SessionKey) -> None: ...


class InMemorySessionStore:
    """Thread-safe dict of sessions; returns copies so callers cannot mutate stored state."""

    def __init__(self) -> None:
        self._sessions: dict[SessionKey, ConversationSession] = {}
        self._lock = threading.Lock()

    def get(self, key: SessionKey) -> Optional[ConversationSession]:
        with self._lock:
            session = self._sessions.get(key)
        return session.model_copy(deep=True) if session is not None else None

    def save(self, session: ConversationSession) -> None:
        with self._lock:
            self._sessions[session.key] = session.model_copy(deep=True)

    def delete(self, key: SessionKey) -> None:
        with self._lock:
            self._sessions.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
