"""
Memory Types

Data structures for conversation memory.

DESIGN RULES:
- Immutable data
- No business logic
- Session-scoped only
"""

import json
from dataclasses import dataclass
from typing import Dict


SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"

ROLES = (SYSTEM, USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    """
    A single role-tagged message.

    The same shape is sent to the completion API and kept in the store.
    """
    role: str  # "system", "user" or "assistant"
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role}")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=ASSISTANT, content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    def to_json(self) -> str:
        """Serialize for list-based stores."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "Message":
        data = json.loads(raw)
        return cls(role=data["role"], content=data.get("content", ""))
