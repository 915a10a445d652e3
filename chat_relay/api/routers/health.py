"""
Health check API endpoints.

Routes: GET /health

System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chat_relay.api.deps import get_session_store
from chat_relay.core.session_store import SessionStore


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
    pending_sessions: int


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(store: SessionStore = Depends(get_session_store)) -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy", pending_sessions=len(store))
