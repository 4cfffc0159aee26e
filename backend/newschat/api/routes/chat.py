"""Chat endpoints: streamed answers and stored transcripts.

The answer is delivered as server-sent events: one ``data`` event per
fragment, then a single ``sources`` event, then the stream closes. Errors
can only be reported with a status code before the first byte is sent.
"""

import json
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from ...models import (
    AnswerFragment,
    ChatEvent,
    ChatRequest,
    ConversationTurnResponse,
    SessionHistoryResponse,
    SessionStatus,
)
from ...services import ChatPipeline, get_chat_pipeline

router = APIRouter(prefix="/chat", tags=["Chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: ChatEvent) -> str:
    """Encode a chat event as a server-sent event."""
    if isinstance(event, AnswerFragment):
        return f"data: {json.dumps({'text': event.text})}\n\n"
    return f"event: sources\ndata: {json.dumps({'sources': event.sources})}\n\n"


@router.post("")
async def chat(
    request: ChatRequest,
    http_request: Request,
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
):
    """Answer a message from the news index and stream the response.

    1. The session's history is loaded (unknown sessions start empty)
    2. The message is embedded and the closest news passages retrieved
    3. The answer is streamed fragment by fragment
    4. The distinct source URLs are sent as a final ``sources`` event
    5. The exchange is appended to the session's history

    Args:
        request: Chat request with message and sessionId

    Returns:
        A text/event-stream response

    Raises:
        NewsChatError: Before streaming starts; mapped to its status code
            by the application error handler
    """
    exchange = await pipeline.prepare(request.message, request.session_id)

    async def events() -> AsyncIterator[str]:
        async for event in pipeline.stream(exchange, http_request.is_disconnected):
            yield format_sse(event)

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/{session_id}", response_model=SessionHistoryResponse)
async def get_session_history(
    session_id: str,
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
) -> SessionHistoryResponse:
    """Get the stored transcript for a session.

    Sessions expire one hour after their last exchange.

    Args:
        session_id: The session ID

    Returns:
        The session's turns in chronological order
    """
    lookup = await pipeline.history(session_id)

    if lookup.status == SessionStatus.UNAVAILABLE:
        raise HTTPException(status_code=503, detail="Session store is unavailable")
    if lookup.status == SessionStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")

    return SessionHistoryResponse(
        session_id=session_id,
        turns=[ConversationTurnResponse.from_dataclass(turn) for turn in lookup.turns],
    )
