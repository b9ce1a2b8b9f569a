"""
History Routes

Read, export and clear a session's stored conversation.
"""

import csv
import io
import logging
from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response

from app.dependencies import get_conversation_store
from app.core.logging import bind_session
from memory.base import ConversationStore, normalize_session_id
from memory.types import Message
from schemas.response import ClearResponse, HistoryResponse, MessageOut


router = APIRouter(tags=["History"])
logger = logging.getLogger(__name__)


def render_csv(messages: List[Message]) -> str:
    """role,content rows; every field quoted, embedded quotes doubled."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["role", "content"])
    for message in messages:
        writer.writerow([message.role, message.content])
    return buffer.getvalue()


def content_disposition(filename: str) -> str:
    """
    Attachment header for an arbitrary filename.

    Session ids are caller-chosen, so the name goes in the RFC 6266
    `filename*` form with a plain ASCII fallback.
    """
    return f"attachment; filename=\"history.csv\"; filename*=UTF-8''{quote(filename, safe='')}"


def render_text(messages: List[Message]) -> str:
    return "\n\n".join(f"{m.role}: {m.content}" for m in messages)


def _history_response(session_id: str, messages: List[Message]) -> HistoryResponse:
    return HistoryResponse(
        session_id=session_id,
        messages=[MessageOut(role=m.role, content=m.content) for m in messages],
    )


@router.get("/history/{session_id}", response_model=HistoryResponse)
async def get_history(
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store),
) -> HistoryResponse:
    """Return the full stored sequence for a session (empty if unseen)."""
    session_id = normalize_session_id(session_id)
    bind_session(session_id)
    messages = await store.read_all(session_id)
    logger.debug(f"Returning {len(messages)} history messages for session: {session_id}")
    return _history_response(session_id, messages)


@router.get("/history/{session_id}/export")
async def export_history(
    session_id: str,
    export_format: str = Query(default="json", alias="format", pattern="^(json|csv|txt)$"),
    store: ConversationStore = Depends(get_conversation_store),
):
    """Export the history as JSON, CSV (role,content) or plain text."""
    session_id = normalize_session_id(session_id)
    bind_session(session_id)
    messages = await store.read_all(session_id)

    if export_format == "csv":
        return Response(
            content=render_csv(messages),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": content_disposition(f"history-{session_id}.csv")},
        )
    if export_format == "txt":
        return PlainTextResponse(render_text(messages))
    return _history_response(session_id, messages)


@router.delete("/session/{session_id}", response_model=ClearResponse)
async def clear_session(
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store),
) -> ClearResponse:
    """Remove a session's history. Always succeeds for unknown sessions."""
    session_id = normalize_session_id(session_id)
    bind_session(session_id)
    await store.clear(session_id)
    logger.info(f"Cleared session {session_id}")
    return ClearResponse(session_id=session_id)
