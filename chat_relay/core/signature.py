"""
Request signing.

A signature is the hex SHA-256 digest of ``"{t}:{m}:{secret}"`` where ``t`` is
the client timestamp in milliseconds and ``m`` the text of the newest user
message.

Dependencies: hashlib, hmac (stdlib)
System role: Signature verification for generate requests
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SignaturePayload:
    """Signed fields: ``t`` (timestamp, ms) and ``m`` (last message text)."""

    t: int | float | None
    m: str


class SignatureVerifier(Protocol):
    def verify(self, payload: SignaturePayload, sign: str | None) -> bool: ...


def _format_timestamp(t: int | float | None) -> str:
    # Integral floats render without the trailing ".0", as a JS client would.
    if isinstance(t, float) and t.is_integer():
        return str(int(t))
    return "" if t is None else str(t)


def generate_signature(payload: SignaturePayload, secret_key: str) -> str:
    sign_text = f"{_format_timestamp(payload.t)}:{payload.m}:{secret_key}"
    return hashlib.sha256(sign_text.encode("utf-8")).hexdigest()


class Sha256SignatureVerifier:
    """Verifies request signatures against a shared secret."""

    def __init__(self, secret_key: str, max_age_seconds: int = 0, clock=time.time) -> None:
        """
        Args:
            secret_key: Shared signing secret
            max_age_seconds: Reject timestamps further than this from now. 0 disables the check
            clock: Wall-clock source returning seconds
        """
        self._secret_key = secret_key
        self._max_age_seconds = max_age_seconds
        self._clock = clock

    def verify(self, payload: SignaturePayload, sign: str | None) -> bool:
        if not sign:
            return False
        if self._max_age_seconds > 0:
            if not isinstance(payload.t, (int, float)):
                return False
            if abs(self._clock() * 1000 - payload.t) > self._max_age_seconds * 1000:
                return False
        expected = generate_signature(payload, self._secret_key)
        return hmac.compare_digest(expected.encode("ascii"), sign.lower().encode("utf-8"))
