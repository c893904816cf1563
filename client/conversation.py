"""
Conversation client: drives one chat view against the tutor chat HTTP API.

    with httpx.Client(base_url="http://localhost:8000") as http:
        convo = ConversationClient.start(http, tutor_id)
        convo.send("What is a derivative?", on_chunk=print)
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx

from api.utils.logger import configure_logging
from client.state import (
    ChatMessage,
    Entry,
    InputRecall,
    PendingSend,
    Persisted,
    Streaming,
    ViewStatus,
)

logger = configure_logging()

ChunkCallback = Callable[[str], None]


class ConversationError(Exception):
    """A send, rerun or fetch failed; local state has been rolled back."""


class ConversationClient:
    def __init__(self, http: httpx.Client, tutor_id: str, chat_id: str, recall_limit: int = 50):
        self.http = http
        self.tutor_id = tutor_id
        self.chat_id = chat_id
        self.entries: list[Entry] = []
        self.status = ViewStatus.IDLE
        self.transitions: list[ViewStatus] = [ViewStatus.IDLE]
        self.history = InputRecall(recall_limit)
        self.editing_index: Optional[int] = None
        self.last_error: Optional[str] = None

    @classmethod
    def start(cls, http: httpx.Client, tutor_id: str) -> "ConversationClient":
        """Create a new chat for the tutor and return a client bound to it."""
        response = http.post("/chats", json={"tutorId": tutor_id})
        _raise_for_error(response)
        return cls(http, tutor_id, response.json()["id"])

    @property
    def messages(self) -> list[Entry]:
        return list(self.entries)

    def load(self) -> list[ChatMessage]:
        """Replace local state with the stored conversation."""
        response = self.http.get("/messages", params={"chatId": self.chat_id})
        _raise_for_error(response)
        stored = [ChatMessage.from_json(m) for m in response.json()]
        self.entries = [Persisted(m) for m in stored]
        return stored

    def send(self, content: str, on_chunk: Optional[ChunkCallback] = None) -> Optional[str]:
        """
        Send a user turn and consume the streamed reply. Returns the assistant text, or None
        for blank input. The user turn is shown optimistically and removed again on failure.
        """
        if not content or not content.strip():
            return None
        self.history.push(content)
        self.editing_index = None
        self.last_error = None

        self.entries.append(PendingSend(content))
        self._set_status(ViewStatus.SENDING)
        payload = {"chatId": self.chat_id, "content": content, "tutorId": self.tutor_id}
        try:
            text = self._submit(payload, on_chunk)
        except (httpx.HTTPError, ConversationError) as e:
            self.entries = [x for x in self.entries if isinstance(x, Persisted)]
            self._fail(e)
            raise ConversationError(str(e)) from e
        self._set_status(ViewStatus.IDLE)
        return text

    def edit(self, index: int) -> str:
        """Return a prior user turn's text for the input field. History is not touched."""
        entry = self.entries[index]
        if entry.role != "user":
            raise ValueError("only user messages can be edited")
        self.editing_index = index
        return entry.content

    def rerun(self, index: int, on_chunk: Optional[ChunkCallback] = None) -> str:
        """
        Resubmit the user turn at `index`, discarding everything after it. On failure the
        resubmitted turn is put back.
        """
        entry = self.entries[index]
        if not isinstance(entry, Persisted) or entry.role != "user":
            raise ValueError("only stored user messages can be rerun")
        kept = self.entries[:index]
        self.entries = list(kept)
        self.last_error = None
        self._set_status(ViewStatus.SENDING)
        payload = {
            "chatId": self.chat_id,
            "content": entry.content,
            "tutorId": self.tutor_id,
            "rerun": True,
            "messageId": entry.message.id,
        }
        try:
            text = self._submit(payload, on_chunk, on_accepted=lambda: self.entries.append(entry))
        except (httpx.HTTPError, ConversationError) as e:
            self.entries = list(kept) + [entry]
            self._fail(e)
            raise ConversationError(str(e)) from e
        self._set_status(ViewStatus.IDLE)
        return text

    def clear(self) -> None:
        response = self.http.delete("/messages", params={"chatId": self.chat_id})
        _raise_for_error(response)
        self.entries = []
        self.editing_index = None
        self.history.reset()

    def rename(self, title: str) -> None:
        _raise_for_error(self.http.patch(f"/chats/{self.chat_id}", json={"title": title}))

    def recall_up(self, current_input: str) -> Optional[str]:
        return self.history.up(current_input)

    def recall_down(self) -> Optional[str]:
        return self.history.down()

    # ---- internals ----

    def _submit(
        self,
        payload: dict,
        on_chunk: Optional[ChunkCallback],
        on_accepted: Optional[Callable[[], None]] = None,
    ) -> str:
        with self.http.stream("POST", "/messages", json=payload) as response:
            if response.is_error:
                response.read()
                raise ConversationError(_error_text(response))
            if on_accepted:
                on_accepted()
            if response.headers.get("content-type", "").startswith("application/json"):
                # Provider failed before streaming; the fallback turn is already stored.
                response.read()
                body = response.json()
                self.last_error = body.get("error")
                logger.warning("tutor reply failed chat_id=%s error=%s", self.chat_id, self.last_error)
                self.load()
                return body.get("content", "")

            self.entries.append(Streaming())
            slot = len(self.entries) - 1
            self._set_status(ViewStatus.STREAMING)
            accumulated = ""
            for chunk in response.iter_text():
                if not chunk:
                    continue
                accumulated += chunk
                self.entries[slot] = Streaming(accumulated)
                if on_chunk:
                    on_chunk(chunk)

        self.load()
        return accumulated

    def _set_status(self, status: ViewStatus) -> None:
        self.status = status
        self.transitions.append(status)

    def _fail(self, error: Exception) -> None:
        self._set_status(ViewStatus.ERROR)
        self.last_error = str(error)
        logger.warning("conversation error chat_id=%s error=%s", self.chat_id, error)
        self._set_status(ViewStatus.IDLE)


def _error_text(response: httpx.Response) -> str:
    try:
        return response.json().get("error") or f"Server error: {response.status_code}"
    except ValueError:
        return f"Server error: {response.status_code}"


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_error:
        raise ConversationError(_error_text(response))
