"""
Generate request validation.

Runs the shape, credential and signature checks in that order and stops at
the first failure. The outcome is either ``Accepted`` with the split
conversation or ``Rejected`` with the error to report.

Dependencies: chat_relay.core.signature, chat_relay.models
System role: Admission control for POST /generate
"""

from collections.abc import Sequence
from dataclasses import dataclass

from chat_relay.core.exceptions import (
    ChatRelayException,
    InvalidCredentialError,
    InvalidHistoryError,
    InvalidSignatureError,
)
from chat_relay.core.signature import SignaturePayload, SignatureVerifier
from chat_relay.models.generate import USER_ROLE, ConversationMessage, GenerateRequest


@dataclass(frozen=True)
class Accepted:
    history: tuple[ConversationMessage, ...]
    new_message: str


@dataclass(frozen=True)
class Rejected:
    error: ChatRelayException

    @property
    def error_kind(self) -> str:
        return self.error.error_kind

    @property
    def status_code(self) -> int:
        return self.error.status_code


ValidationOutcome = Accepted | Rejected


class RequestValidator:
    """Admission checks for generate requests."""

    def __init__(
        self,
        site_password: str = "",
        enforce_signature: bool = False,
        signature_verifier: SignatureVerifier | None = None,
    ) -> None:
        """
        Initialize validator.

        Args:
            site_password: Accepted password, or comma-separated list of them. Empty disables the check
            enforce_signature: Whether to verify signatures (production only)
            signature_verifier: Verifier used when signatures are enforced
        """
        if enforce_signature and signature_verifier is None:
            raise ValueError("signature_verifier is required when enforce_signature is set")
        self._site_password = site_password
        self._passlist = frozenset(entry for entry in site_password.split(",") if entry)
        self._enforce_signature = enforce_signature
        self._signature_verifier = signature_verifier

    def validate(self, request: GenerateRequest) -> ValidationOutcome:
        """
        Validate a generate request.

        Args:
            request: Parsed request body

        Returns:
            Accepted with (history, new_message), or Rejected with the failing check's error
        """
        messages = request.messages
        if not messages or messages[-1].role != USER_ROLE:
            return Rejected(InvalidHistoryError(details={"message_count": len(messages or [])}))

        if self._site_password and not self._password_matches(request.password):
            return Rejected(InvalidCredentialError())

        history, new_message = split_conversation(messages)

        if self._enforce_signature:
            payload = SignaturePayload(t=request.time, m=new_message)
            if not self._signature_verifier.verify(payload, request.sign):
                return Rejected(InvalidSignatureError())

        return Accepted(history=history, new_message=new_message)

    def _password_matches(self, password: str | None) -> bool:
        if password is None:
            return False
        return password == self._site_password or password in self._passlist


def split_conversation(messages: Sequence[ConversationMessage]) -> tuple[tuple[ConversationMessage, ...], str]:
    """Split a conversation into (history, newest message text)."""
    return tuple(messages[:-1]), messages[-1].text
