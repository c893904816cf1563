"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import ChatResponse, MessageResponse
    from api.schemas.chat_schemas import ChatResponse
"""

from api.schemas.chat_schemas import (
    ChatResponse,
    ClearMessagesResponse,
    CreateChatRequest,
    FallbackMessageResponse,
    MessageResponse,
    RenameChatRequest,
    SendMessageRequest,
    SuccessResponse,
)
from api.schemas.tutor_schemas import SeedResponse, TutorResponse

__all__ = [
    "ChatResponse",
    "ClearMessagesResponse",
    "CreateChatRequest",
    "FallbackMessageResponse",
    "MessageResponse",
    "RenameChatRequest",
    "SendMessageRequest",
    "SuccessResponse",
    "SeedResponse",
    "TutorResponse",
]
