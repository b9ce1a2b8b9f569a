"""
Stream Relay

Bridges a streamed completion to the caller as server-sent events and
records the finished turn.

STATES:
    IDLE → STREAMING (first chunk) → DONE (end of stream)
    IDLE | STREAMING → FAILED (upstream error)

GUARANTEES:
- One frame per chunk, in order, forwarded before the next chunk is read
- The turn is written at most once, after the stream ends, fails or the
  caller disconnects
- Caller disconnect closes the upstream stream
"""

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

import anyio

from app.core.errors import StoreUnavailable, UpstreamError
from memory.base import ConversationStore


logger = logging.getLogger(__name__)

DONE_FRAME = "event: done\ndata: {}\n\n"


class RelayState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


def data_frame(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def error_frame(payload: Dict[str, Any]) -> str:
    return f"event: error\n{data_frame(payload)}"


class StreamRelay:
    """
    Relays one streamed completion for one session turn.

    Usage:
        relay = StreamRelay(store, session_id, message)
        await relay.open(gateway.complete_streaming(messages))  # may raise UpstreamError
        return StreamingResponse(relay.events(), ...)  # call relay.finish() on teardown
    """

    def __init__(self, store: ConversationStore, session_id: str, user_message: str):
        self._store = store
        self._session_id = session_id
        self._user_message = user_message
        self._source: Optional[Any] = None
        self._parts: List[str] = []
        self._state = RelayState.IDLE
        self._persisted = False

    @property
    def state(self) -> RelayState:
        return self._state

    @property
    def text(self) -> str:
        """Everything relayed so far."""
        return "".join(self._parts)

    async def open(self, pending) -> None:
        """
        Await the upstream stream.

        Args:
            pending: Awaitable resolving to an async iterable of text chunks

        Raises:
            UpstreamError: The stream could not be opened. The relay is FAILED
                and nothing is stored.
        """
        try:
            self._source = await pending
        except UpstreamError:
            self._state = RelayState.FAILED
            raise

    def attach(self, source) -> None:
        """Use an already-open chunk source (e.g. a canned reply)."""
        self._source = source

    async def events(self) -> AsyncIterator[str]:
        """Yield event frames until the stream ends."""
        if self._source is None:
            raise RuntimeError("StreamRelay.events() called before open()")
        try:
            async for chunk in self._source:
                if self._state is RelayState.IDLE:
                    self._state = RelayState.STREAMING
                self._parts.append(chunk)
                yield data_frame({"chunk": chunk})
            self._state = RelayState.DONE
            yield DONE_FRAME
        except UpstreamError as e:
            self._state = RelayState.FAILED
            logger.warning(f"Stream for session {self._session_id} failed after {len(self._parts)} chunks: {e}")
            yield error_frame(e.to_body())
        finally:
            await self.finish()

    async def finish(self) -> None:
        """
        Close the upstream stream and store the turn. Safe to call repeatedly.

        Runs on completion, failure and caller disconnect alike, including a
        disconnect before events() was ever iterated.
        """
        if self._source is None:
            return
        with anyio.CancelScope(shield=True):
            await self._close_source()
            await self._persist()

    async def _close_source(self) -> None:
        close = getattr(self._source, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            logger.warning(f"Closing upstream stream for session {self._session_id} failed: {e}")

    async def _persist(self) -> None:
        if self._persisted:
            return
        self._persisted = True
        if self._state not in (RelayState.DONE, RelayState.FAILED):
            logger.info(f"Caller left session {self._session_id} mid-stream; storing partial reply")
        try:
            await self._store.append_turn(self._session_id, self._user_message, self.text)
        except StoreUnavailable as e:
            # The response is already on the wire; nothing left to report to.
            logger.error(f"Could not store streamed turn for session {self._session_id}: {e}")
