"""
Python client for the tutor chat API.

- ConversationClient: one chat view (send, rerun, edit, clear, input recall)
- state: tagged local message entries and the input recall buffer
"""

from client.conversation import ConversationClient, ConversationError
from client.state import (
    ChatMessage,
    InputRecall,
    PendingSend,
    Persisted,
    Streaming,
    ViewStatus,
)

__all__ = [
    "ConversationClient",
    "ConversationError",
    "ChatMessage",
    "InputRecall",
    "PendingSend",
    "Persisted",
    "Streaming",
    "ViewStatus",
]
