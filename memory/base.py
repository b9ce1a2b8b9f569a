"""
Conversation Store Interface

Bounded, append-only message history keyed by session id.
Storage-agnostic - the in-memory and Redis backends behave the same from the
caller's side apart from persistence and cross-instance sharing.

DESIGN RULES:
- Sessions are created lazily and never expire here
- A blank session id maps to DEFAULT_SESSION_ID
- Backend failures raise StoreUnavailable, never an empty result
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from memory.types import Message


DEFAULT_SESSION_ID = "anon"

# Default maximum messages kept per session
DEFAULT_HISTORY_CAP = 48

# Once the cap is exceeded, history is cut back to this share of the cap
TRIM_RATIO = 0.5


def normalize_session_id(session_id: Optional[str]) -> str:
    """Map missing or blank ids to the default session."""
    if not session_id or not str(session_id).strip():
        return DEFAULT_SESSION_ID
    return str(session_id)


class ConversationStore(ABC):
    """
    Abstract base for session history storage.

    Implementations:
    - InMemoryConversationStore (process-local)
    - RedisConversationStore (shared, external list store)
    """

    def __init__(self, history_cap: int = DEFAULT_HISTORY_CAP):
        """
        Args:
            history_cap: Maximum messages per session before trimming
        """
        if history_cap < 2:
            raise ValueError("history_cap must allow at least one turn")
        self._history_cap = history_cap

    @property
    def history_cap(self) -> int:
        return self._history_cap

    @property
    def trim_target(self) -> int:
        """Length a session is cut back to once it exceeds the cap."""
        return max(2, int(self._history_cap * TRIM_RATIO))

    @abstractmethod
    async def append(self, session_id: str, *messages: Message) -> int:
        """
        Append messages to the end of a session in one operation.

        Returns:
            The session length after the append
        """

    @abstractmethod
    async def read_all(self, session_id: str) -> List[Message]:
        """Return the full ordered history, oldest first."""

    @abstractmethod
    async def trim(self, session_id: str, max_len: int) -> None:
        """Keep only the most recent max_len messages."""

    @abstractmethod
    async def clear(self, session_id: str) -> None:
        """Remove the session entirely. Idempotent."""

    async def close(self) -> None:
        """Release backend resources."""
        return None

    async def append_turn(self, session_id: str, user_text: str, assistant_text: str) -> int:
        """
        Record one user/assistant turn and apply the trim policy.

        Returns:
            The session length after trimming
        """
        length = await self.append(
            session_id,
            Message.user(user_text),
            Message.assistant(assistant_text),
        )
        if length > self._history_cap:
            await self.trim(session_id, self.trim_target)
            return self.trim_target
        return length
