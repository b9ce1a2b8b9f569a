"""
Redis Conversation Store

Session history kept in Redis lists, one list per session under
"sess:<session_id>". Shared by every server instance pointing at the same
Redis and as durable as that Redis is configured to be.

DESIGN RULES:
- One Redis command per store operation
- Redis failures surface as StoreUnavailable
- Expiry, if any, is Redis' own policy
"""

import logging
from typing import List

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from app.core.errors import StoreUnavailable
from memory.base import ConversationStore, DEFAULT_HISTORY_CAP, normalize_session_id
from memory.types import Message


logger = logging.getLogger(__name__)

KEY_PREFIX = "sess:"


def session_key(session_id: str) -> str:
    return f"{KEY_PREFIX}{normalize_session_id(session_id)}"


class RedisConversationStore(ConversationStore):
    """
    Conversation store backed by Redis lists.

    RPUSH appends, LRANGE reads, LTRIM trims and DEL clears.
    """

    def __init__(self, client: aioredis.Redis, history_cap: int = DEFAULT_HISTORY_CAP):
        """
        Args:
            client: Connected redis.asyncio client (decode_responses=True)
            history_cap: Maximum messages per session before trimming
        """
        super().__init__(history_cap)
        self._client = client

    @classmethod
    def from_url(
        cls,
        url: str,
        history_cap: int = DEFAULT_HISTORY_CAP,
        socket_timeout: float = 5.0,
    ) -> "RedisConversationStore":
        """Create a store with its own client. Timeouts bound every command."""
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        logger.info("Redis conversation store configured")
        return cls(client, history_cap=history_cap)

    async def append(self, session_id: str, *messages: Message) -> int:
        if not messages:
            return await self._call("llen", session_key(session_id))
        payload = [message.to_json() for message in messages]
        return await self._call("rpush", session_key(session_id), *payload)

    async def read_all(self, session_id: str) -> List[Message]:
        raw = await self._call("lrange", session_key(session_id), 0, -1)
        history: List[Message] = []
        for item in raw:
            try:
                history.append(Message.from_json(item))
            except (ValueError, KeyError, TypeError) as e:
                # json.JSONDecodeError is a ValueError
                logger.warning(f"Skipping malformed history entry for session {session_id}: {e}")
        return history

    async def trim(self, session_id: str, max_len: int) -> None:
        key = session_key(session_id)
        if max_len <= 0:
            await self._call("delete", key)
            return
        await self._call("ltrim", key, -max_len, -1)

    async def clear(self, session_id: str) -> None:
        await self._call("delete", session_key(session_id))

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, command: str, *args):
        """Run one Redis command, mapping client errors to StoreUnavailable."""
        try:
            return await getattr(self._client, command)(*args)
        except (RedisError, OSError) as e:
            logger.error(f"Redis {command} failed: {e}")
            raise StoreUnavailable(f"redis {command} failed: {e}") from e
