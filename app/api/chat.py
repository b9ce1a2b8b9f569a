"""
Chat Routes

Thin delegation layer to the chat orchestrator.
Contains NO prompt building or store access.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.dependencies import get_chat_orchestrator
from orchestration.chat import ChatOrchestrator, ChatTurn
from orchestration.relay import StreamRelay
from schemas.request import ChatRequest
from schemas.response import ChatResponse


router = APIRouter(tags=["Chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class RelayResponse(StreamingResponse):
    """Event-stream response that always finishes its relay on teardown."""

    def __init__(self, relay: StreamRelay):
        super().__init__(relay.events(), media_type="text/event-stream", headers=SSE_HEADERS)
        self.relay = relay

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            # The frame generator may never have started if the caller left early
            await self.relay.finish()


def _turn_from(request: ChatRequest) -> ChatTurn:
    return ChatTurn.create(
        message=request.message,
        session_id=request.session_id,
        subject=request.subject,
        mode=request.mode,
        tone=request.tone,
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> ChatResponse:
    """
    Answer one chat message using the session's stored history.

    Errors (400 validation/safety, 502 upstream, 500 store) are rendered
    by the app's exception handlers.
    """
    result = await orchestrator.chat(_turn_from(request))
    return ChatResponse(reply=result.reply, meta=result.meta)


@router.post("/stream-fetch")
@router.post("/stream")
async def stream_chat(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> RelayResponse:
    """
    Stream the answer as server-sent events.

    Frames: `data: {"chunk": ...}` per chunk, then `event: done`.
    If the completion API rejects the request, a JSON error is returned
    instead of an event stream.
    """
    relay = await orchestrator.open_stream(_turn_from(request))
    return RelayResponse(relay)
