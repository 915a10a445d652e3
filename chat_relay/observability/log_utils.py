"""
Logging utilities for safe structured logging.

Session identifiers are bearer secrets for the stream they unlock, so they are
only ever logged in shortened form. Upstream error text is flattened to a
single bounded line before it reaches a log record.

Dependencies: None
System role: Logging helper functions
"""

from typing import Any

SESSION_ID_VISIBLE_CHARS = 8


def safe_log_value(value: Any, max_length: int = 300) -> str:
    """
    Render a value as one bounded log line.

    Collections are summarized by size and never dumped, since they may hold
    conversation text. Exceptions render as ``Type: message``.

    Args:
        value: Value to render
        max_length: Maximum length before truncating

    Returns:
        str: Single-line representation
    """
    if value is None:
        return "None"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    if isinstance(value, BaseException):
        text = f"{type(value).__name__}: {value}"
    elif isinstance(value, str):
        text = value
    else:
        try:
            text = str(value)
        except Exception as e:
            return f"<unable to log: {type(e).__name__}>"

    text = " ".join(text.split())
    if len(text) > max_length:
        return text[:max_length] + f"... (truncated, {len(text)} total)"
    return text


def mask_session_id(session_id: str | None) -> str:
    """Shorten a session ID to a loggable prefix."""
    if not session_id:
        return "None"
    if len(session_id) <= SESSION_ID_VISIBLE_CHARS:
        return "***"
    return session_id[:SESSION_ID_VISIBLE_CHARS] + "..."
