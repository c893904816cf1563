"""
Local conversation state for one chat view.

Each entry is one of three variants, so a view can tell stored turns from the
optimistic user turn and the in-flight assistant reply without inspecting ids:
- Persisted: a message the server has stored
- PendingSend: the user's turn, shown before the server confirmed it
- Streaming: the assistant reply accumulated so far
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ViewStatus(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    ERROR = "error"


@dataclass(frozen=True)
class ChatMessage:
    id: str
    chat_id: str
    role: str
    content: str
    created_at: str

    @classmethod
    def from_json(cls, data: dict) -> "ChatMessage":
        return cls(
            id=data["id"],
            chat_id=data["chatId"],
            role=data["role"],
            content=data["content"],
            created_at=data["createdAt"],
        )


@dataclass(frozen=True)
class Persisted:
    message: ChatMessage

    @property
    def role(self) -> str:
        return self.message.role

    @property
    def content(self) -> str:
        return self.message.content


@dataclass(frozen=True)
class PendingSend:
    content: str
    role: str = "user"


@dataclass(frozen=True)
class Streaming:
    partial: str = ""
    role: str = "assistant"

    @property
    def content(self) -> str:
        return self.partial


Entry = Union[Persisted, PendingSend, Streaming]


class InputRecall:
    """
    Most recent inputs, newest first, bounded to `limit` entries.
    up()/down() walk the buffer the way arrow keys do in a shell prompt.
    """

    def __init__(self, limit: int = 50):
        self._items: deque[str] = deque(maxlen=limit)
        self.index = -1

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, i: int) -> str:
        return self._items[i]

    def push(self, text: str) -> None:
        self._items.appendleft(text)
        self.index = -1

    def up(self, current_input: str) -> Optional[str]:
        """
        Older entry, or None when there is nothing to recall. Only starts from an empty
        input; once recalling, repeated calls keep walking back.
        """
        if current_input and self.index < 0:
            return None
        if self.index + 1 >= len(self._items):
            return None
        self.index += 1
        return self._items[self.index]

    def down(self) -> Optional[str]:
        """Newer entry; "" once past the newest; None when not recalling."""
        if self.index < 0:
            return None
        if self.index == 0:
            self.index = -1
            return ""
        self.index -= 1
        return self._items[self.index]

    def reset(self) -> None:
        self.index = -1
