"""
Chat Orchestrator

Runs one conversational turn end to end:
validate → guards → history + template → completion → store turn.

FLOW:
    message → safety filter → attribution short-circuit?
            → [system] + history + [user] → gateway → append_turn
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional

from app.core.config import Settings, settings
from app.core.errors import SafetyRejection, ValidationError
from app.core.logging import bind_session
from llm.gateway import CompletionGateway
from memory.base import ConversationStore, normalize_session_id
from orchestration.relay import StreamRelay
from prompts.builder import build_chat_messages
from prompts.guards import attribution_reply, is_attribution_question, is_message_safe


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatTurn:
    """Validated inputs of one chat request."""
    session_id: str
    message: str
    subject: str = "General"
    mode: str = "concise"
    tone: str = "teaching"

    @classmethod
    def create(
        cls,
        message: Optional[str],
        session_id: Optional[str] = None,
        subject: Optional[str] = None,
        mode: Optional[str] = None,
        tone: Optional[str] = None,
    ) -> "ChatTurn":
        """
        Validate and default the request fields.

        Raises:
            ValidationError: message is missing or blank
            SafetyRejection: message matches the denylist
        """
        if not message or not message.strip():
            raise ValidationError("message")
        if not is_message_safe(message):
            raise SafetyRejection()
        return cls(
            session_id=normalize_session_id(session_id),
            message=message,
            subject=subject or "General",
            mode=mode or "concise",
            tone=tone or "teaching",
        )


@dataclass(frozen=True)
class ChatReply:
    reply: str
    meta: Dict[str, Any] = field(default_factory=dict)


async def _canned_chunks(text: str) -> AsyncIterator[str]:
    yield text


class ChatOrchestrator:
    """
    Entry point for chat turns, buffered and streamed.

    The store and gateway are injected; this class holds no session state.
    """

    def __init__(
        self,
        store: ConversationStore,
        gateway: CompletionGateway,
        config: Settings = settings,
    ):
        self._store = store
        self._gateway = gateway
        self._config = config

    async def _build_messages(self, turn: ChatTurn):
        history = await self._store.read_all(turn.session_id)
        logger.debug(f"Session {turn.session_id}: {len(history)} stored messages")
        return build_chat_messages(
            history,
            turn.message,
            subject=turn.subject,
            tone=turn.tone,
            mode=turn.mode,
            config=self._config,
        )

    async def chat(self, turn: ChatTurn) -> ChatReply:
        """
        Run a buffered turn.

        Returns:
            ChatReply with the assistant text

        Raises:
            UpstreamError: Completion API failed (turn not stored)
            StoreUnavailable: History could not be read or written
        """
        bind_session(turn.session_id)
        if is_attribution_question(turn.message):
            reply = attribution_reply(self._config)
            await self._store.append_turn(turn.session_id, turn.message, reply)
            logger.info(f"Session {turn.session_id}: attribution reply served locally")
            return ChatReply(reply=reply, meta={"version": self._config.app_version})

        messages = await self._build_messages(turn)
        result = await self._gateway.complete(messages)
        await self._store.append_turn(turn.session_id, turn.message, result.reply_text)
        logger.info(f"Session {turn.session_id}: turn stored ({len(result.reply_text)} chars)")
        return ChatReply(
            reply=result.reply_text,
            meta={"model": result.raw_response.get("model") or self._gateway.default_options.model},
        )

    async def open_stream(self, turn: ChatTurn) -> StreamRelay:
        """
        Prepare a streamed turn.

        The upstream stream is opened before returning, so upstream rejection
        raises here and the caller can answer with a plain JSON error.

        Raises:
            UpstreamError: Completion API rejected the request
            StoreUnavailable: History could not be read
        """
        bind_session(turn.session_id)
        relay = StreamRelay(self._store, turn.session_id, turn.message)
        if is_attribution_question(turn.message):
            relay.attach(_canned_chunks(attribution_reply(self._config)))
            return relay

        messages = await self._build_messages(turn)
        await relay.open(self._gateway.complete_streaming(messages))
        return relay
