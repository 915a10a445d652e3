"""
Exception hierarchy for the chat relay.

Every error carries an ``error_kind`` (the stable name reported to clients)
and the HTTP status it maps to.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ChatRelayException(Exception):
    """Base exception for all chat relay errors."""

    error_kind = "ChatRelayError"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_payload(self) -> dict[str, Any]:
        """Client-facing error envelope."""
        return {"error": {"message": self.message}}


class InvalidHistoryError(ChatRelayException):
    """Raised when the message history is missing, empty or not ending on a user turn."""

    error_kind = "InvalidHistory"
    status_code = 400

    def __init__(
        self,
        message: str = "Invalid message history: The last message must be from user role.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class InvalidCredentialError(ChatRelayException):
    """Raised when the supplied password matches neither the site password nor the passlist."""

    error_kind = "InvalidCredential"
    status_code = 401

    def __init__(self, message: str = "Invalid password.", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class InvalidSignatureError(ChatRelayException):
    """Raised when a request signature does not verify."""

    error_kind = "InvalidSignature"
    status_code = 401

    def __init__(self, message: str = "Invalid signature.", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class SessionNotFoundError(ChatRelayException):
    """Raised when a session ID is absent, expired or already consumed."""

    error_kind = "SessionNotFound"
    status_code = 400

    def __init__(self, session_id: str | None, details: dict[str, Any] | None = None) -> None:
        """
        Initialize session not found error.

        The raw session ID is kept on the instance but never put in ``details``,
        which ends up in logs.

        Args:
            session_id: ID that failed to resolve
            details: Additional context
        """
        self.session_id = session_id
        super().__init__("Invalid session ID.", details)


class ProviderFailureError(ChatRelayException):
    """Raised when the completion provider fails."""

    error_kind = "ProviderFailure"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider failure.

        Args:
            message: Error message
            code: Client-facing error code, usually the upstream exception's class name
            details: Additional context
        """
        self.code = code or self.error_kind
        details = details or {}
        details["code"] = self.code
        super().__init__(message, details)

    def to_payload(self) -> dict[str, Any]:
        return {"error": {"code": self.code}}
