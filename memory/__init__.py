# Memory Package
from memory.types import Message
from memory.base import ConversationStore, DEFAULT_SESSION_ID, normalize_session_id
from memory.session_store import InMemoryConversationStore

__all__ = [
    "Message",
    "ConversationStore",
    "DEFAULT_SESSION_ID",
    "normalize_session_id",
    "InMemoryConversationStore",
]
