"""
Session registration service.

Validates a generate request and registers its pending exchange.

Dependencies: chat_relay.core.request_validator, chat_relay.core.session_store
System role: POST /generate orchestration
"""

import logging

from chat_relay.core.request_validator import Rejected, RequestValidator
from chat_relay.core.session_store import SessionStore
from chat_relay.models.generate import GenerateRequest

logger = logging.getLogger(__name__)


class SessionService:
    """Admits generate requests into the session store."""

    def __init__(self, store: SessionStore, validator: RequestValidator) -> None:
        self.store = store
        self.validator = validator

    def register(self, request: GenerateRequest) -> str:
        """
        Validate a request and store its pending exchange.

        Args:
            request: Parsed POST /generate body

        Returns:
            str: Session ID to pass to GET /generate

        Raises:
            InvalidHistoryError: Empty history or last turn not from the user
            InvalidCredentialError: Password mismatch
            InvalidSignatureError: Signature mismatch in production
        """
        outcome = self.validator.validate(request)
        if isinstance(outcome, Rejected):
            logger.warning(
                "Generate request rejected",
                extra={"error_kind": outcome.error_kind, "status_code": outcome.status_code},
            )
            raise outcome.error

        return self.store.create(outcome.history, outcome.new_message)
