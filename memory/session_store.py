"""
In-Memory Conversation Store

Process-local session history.

DESIGN RULES:
- No persistence - lost on restart
- No cross-instance sharing
- Every operation holds the lock, so a turn's pair is appended atomically
"""

from typing import Dict, List
from threading import Lock

from memory.base import ConversationStore, DEFAULT_HISTORY_CAP, normalize_session_id
from memory.types import Message


class InMemoryConversationStore(ConversationStore):
    """
    In-memory conversation store.

    Stores message lists keyed by session_id.
    NOT persistent - data lives only in process memory.

    Thread-safe for concurrent access.
    """

    def __init__(self, history_cap: int = DEFAULT_HISTORY_CAP):
        super().__init__(history_cap)
        self._sessions: Dict[str, List[Message]] = {}
        self._lock = Lock()

    async def append(self, session_id: str, *messages: Message) -> int:
        key = normalize_session_id(session_id)
        with self._lock:
            history = self._sessions.setdefault(key, [])
            history.extend(messages)
            return len(history)

    async def read_all(self, session_id: str) -> List[Message]:
        key = normalize_session_id(session_id)
        with self._lock:
            return list(self._sessions.get(key, ()))

    async def trim(self, session_id: str, max_len: int) -> None:
        """
        Keep the newest max_len messages.

        Args:
            session_id: Session identifier
            max_len: Messages to retain (0 empties the session)
        """
        key = normalize_session_id(session_id)
        with self._lock:
            history = self._sessions.get(key)
            if history is None or len(history) <= max_len:
                return
            self._sessions[key] = history[len(history) - max_len:] if max_len > 0 else []

    async def clear(self, session_id: str) -> None:
        key = normalize_session_id(session_id)
        with self._lock:
            self._sessions.pop(key, None)

    def session_count(self) -> int:
        """Get count of stored sessions."""
        with self._lock:
            return len(self._sessions)
