"""
Server-sent event framing for the generate stream.

Dependencies: json (stdlib)
System role: Streaming protocol encoding
"""

import json
from enum import Enum

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class StreamEventType(str, Enum):
    """Named events sent besides plain data frames."""

    ERROR = "error"


def _dumps(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def encode_message_frame(chunk: str) -> bytes:
    """Frame one provider chunk as ``data: {"message": ...}`` followed by a blank line."""
    return f"data: {_dumps({'message': chunk})}\n\n".encode("utf-8")


def encode_error_frame(code: str) -> bytes:
    """Terminal in-band error for streams whose headers are already sent."""
    return f"event: {StreamEventType.ERROR.value}\ndata: {_dumps({'error': {'code': code}})}\n\n".encode("utf-8")
