"""
Generate API endpoints.

Routes:
- POST /generate - Validate a conversation and register it under a new session ID
- GET /generate?sessionId=... - Stream the completion for a registered session (SSE)

Dependencies: chat_relay.application.services
System role: Two-phase chat streaming HTTP API
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from chat_relay.api.deps import get_session_service, get_stream_relay
from chat_relay.application.services import SessionService, StreamRelay
from chat_relay.models.generate import GenerateRequest, GenerateResponse
from chat_relay.models.streaming import SSE_HEADERS, SSE_MEDIA_TYPE

router = APIRouter(prefix="/generate", tags=["generate"])


@router.post("", response_model=GenerateResponse)
async def register_generation(
    request: GenerateRequest,
    session_service: SessionService = Depends(get_session_service),
) -> GenerateResponse:
    """Register a conversation for streaming.

    Args:
        request: Body with sign, time, messages and pass
        session_service: Injected SessionService

    Returns:
        GenerateResponse: ``{"sessionId": ...}``

    Raises:
        InvalidHistoryError(400), InvalidCredentialError(401), InvalidSignatureError(401)
    """
    session_id = session_service.register(request)
    return GenerateResponse(session_id=session_id)


@router.get("")
async def stream_generation(
    request: Request,
    session_id: str | None = Query(default=None, alias="sessionId"),
    relay: StreamRelay = Depends(get_stream_relay),
) -> StreamingResponse:
    """Stream the completion for a registered session.

    SSE Format:
        data: {"message": "..."}

        event: error
        data: {"error": {"code": "..."}}

    Args:
        request: Incoming request, polled for client disconnects
        session_id: Session ID from POST /generate
        relay: Injected StreamRelay

    Returns:
        StreamingResponse: SSE stream of message frames

    Raises:
        SessionNotFoundError(400), ProviderFailureError(500) before the first byte
    """
    frames = await relay.open(session_id, is_disconnected=request.is_disconnected)
    return StreamingResponse(
        frames,
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
