"""
Generate endpoint schemas.

Request/response contracts for the two-phase generate handshake.

Dependencies: pydantic
System role: Generate API contracts
"""

from pydantic import BaseModel, ConfigDict, Field

USER_ROLE = "user"


class MessagePart(BaseModel):
    """A single text part of a conversation message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = ""


class ConversationMessage(BaseModel):
    """
    One turn of the conversation.

    Attributes:
        role: "user", or "model"/"assistant"/"system" for non-user turns
        parts: Text parts in order
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: str
    parts: tuple[MessagePart, ...] = ()

    @property
    def text(self) -> str:
        """Parts concatenated in order, no separator."""
        return "".join(part.text for part in self.parts)


class GenerateRequest(BaseModel):
    """Request body for POST /generate."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sign: str | None = Field(default=None, description="Request signature")
    time: int | float | None = Field(default=None, description="Client timestamp (ms since epoch) covered by the signature")
    messages: list[ConversationMessage] | None = Field(default=None, description="Conversation, oldest first")
    password: str | None = Field(default=None, alias="pass", description="Site password")


class GenerateResponse(BaseModel):
    """Response body for POST /generate."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
