"""
Chat and message schemas.
"""

from typing import Literal, Optional

from api.schemas.base import CamelModel


class CreateChatRequest(CamelModel):
    # Optional so a missing id is reported as {"error": "tutorId is required"}.
    tutor_id: Optional[str] = None


class RenameChatRequest(CamelModel):
    title: Optional[str] = None


class ChatResponse(CamelModel):
    id: str
    tutor_id: str
    title: Optional[str] = None
    created_at: str
    updated_at: str


class MessageResponse(CamelModel):
    id: str
    chat_id: str
    role: Literal["user", "assistant"]
    content: str
    created_at: str


class SendMessageRequest(CamelModel):
    """Body for POST /messages."""
    chat_id: Optional[str] = None
    content: Optional[str] = None
    tutor_id: Optional[str] = None
    rerun: bool = False
    # Rerun only: the user message being resubmitted; later stored turns are dropped.
    message_id: Optional[str] = None


class FallbackMessageResponse(MessageResponse):
    """Send-message body when the provider failed before streaming: the stored fallback turn plus the error."""
    error: str


class SuccessResponse(CamelModel):
    success: bool = True


class ClearMessagesResponse(SuccessResponse):
    deleted: int = 0
