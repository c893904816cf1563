"""
Completion relay: build the tutor prompt from stored history, stream the provider's
reply to the caller chunk by chunk, and persist the assistant turn (and, on the first
exchange, a generated chat title) once the stream is done.

The relay holds the provider client; it is constructed once per process in
api.bootstrap and handed to request handlers.
"""

from __future__ import annotations

from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from sqlalchemy.orm import Session as DBSession

from api.errors import NotFoundError, ProviderError, require
from api.models.models import Message
from api.prompt_builders import build_conversation_prompt, build_title_prompt, clean_title
from api.services.chat_service import ChatService
from api.services.tutor_service import TutorService
from api.utils.logger import configure_logging, log_request
from infra.llm.base import LLM, PromptMessage

logger = configure_logging()

FALLBACK_MESSAGE = "I'm sorry, I encountered an error processing your request. Please try again later."


@dataclass
class PreparedTurn:
    """Everything the stream needs once the request-scoped lookups are done."""

    chat_id: str
    prompt: list[PromptMessage]
    first_exchange: bool
    user_message: Optional[Message] = None


@dataclass
class RelayStream:
    """Provider accepted the prompt; chunks are relayed as they arrive."""

    chunks: AsyncIterator[str]


@dataclass
class RelayFallback:
    """Provider failed before emitting anything; the fallback assistant turn is already stored."""

    message: Message
    error: str


@dataclass
class _StreamState:
    parts: list[str] = field(default_factory=list)
    finished: bool = False
    failed: bool = False

    @property
    def text(self) -> str:
        return "".join(self.parts)


class CompletionRelay:
    def __init__(self, llm: LLM, title_llm: LLM | None = None):
        self.llm = llm
        self.title_llm = title_llm or llm

    def prepare(
        self,
        db: DBSession,
        chat_id: str | None,
        tutor_id: str | None,
        content: str | None,
        rerun: bool = False,
        message_id: str | None = None,
    ) -> PreparedTurn:
        """
        Validate, store the user turn (unless rerun), refresh chat activity and build the prompt.
        Raises ValidationError / NotFoundError / StorageError before anything is streamed.
        """
        require(chat_id, "chatId")
        require(content, "content")
        require(tutor_id, "tutorId")

        tutor = TutorService(db).get_tutor(tutor_id)
        chats = ChatService(db)
        chat = chats.get_chat(chat_id)
        if chat.tutor_id != tutor.id:
            raise NotFoundError("Chat not found for this tutor")

        user_message = None
        if rerun:
            # Stored history after the rerun turn is discarded so it matches the client's view.
            if message_id:
                chats.truncate_after(chat_id, message_id, content=content)
            prior_count = chats.count_messages(chat_id)
            chats.mark_active(chat_id)
        else:
            prior_count = chats.count_messages(chat_id)
            user_message = chats.append_message(chat_id, "user", content)

        history = chats.list_messages(chat_id)
        logger.info(
            "turn prepared chat_id=%s tutor=%s history=%s rerun=%s",
            chat_id,
            tutor.name,
            len(history),
            rerun,
        )
        return PreparedTurn(
            chat_id=chat_id,
            prompt=build_conversation_prompt(tutor, history),
            first_exchange=prior_count <= 1,
            user_message=user_message,
        )

    async def respond(
        self,
        db: DBSession,
        chat_id: str | None,
        tutor_id: str | None,
        content: str | None,
        rerun: bool = False,
        message_id: str | None = None,
    ) -> RelayStream | RelayFallback:
        """
        Prepare the turn and open the provider stream. The first chunk is awaited here so a
        provider that fails up front is reported as RelayFallback instead of a broken stream.
        """
        turn = self.prepare(db, chat_id, tutor_id, content, rerun=rerun, message_id=message_id)
        provider = self.llm.stream(turn.prompt)
        try:
            first = await anext(provider, None)
            if first is None:
                raise ProviderError("Completion provider returned an empty response")
        except Exception as e:
            await provider.aclose()
            logger.exception("provider stream failed to start chat_id=%s", turn.chat_id)
            return RelayFallback(message=self._store_fallback(db, turn.chat_id), error=str(e))

        return RelayStream(chunks=self._relay(db, turn, provider, first))

    async def _relay(
        self,
        db: DBSession,
        turn: PreparedTurn,
        provider: AsyncIterator[str],
        first: str,
    ) -> AsyncIterator[str]:
        state = _StreamState()
        try:
            async with aclosing(provider):
                state.parts.append(first)
                yield first
                async for chunk in provider:
                    state.parts.append(chunk)
                    yield chunk
            state.finished = True
        except Exception:
            state.failed = True
            logger.exception("provider stream failed chat_id=%s relayed_chars=%s", turn.chat_id, len(state.text))
            self._store_fallback(db, turn.chat_id)
            return
        finally:
            if not (state.finished or state.failed) and state.text:
                # Client went away mid-stream: keep what was generated so far.
                logger.warning("stream abandoned chat_id=%s relayed_chars=%s", turn.chat_id, len(state.text))
                ChatService(db).append_message(turn.chat_id, "assistant", state.text)

        ChatService(db).append_message(turn.chat_id, "assistant", state.text)
        logger.info("assistant turn stored chat_id=%s chars=%s", turn.chat_id, len(state.text))
        if turn.first_exchange:
            await self.generate_title(db, turn.chat_id)

    async def generate_title(self, db: DBSession, chat_id: str) -> str | None:
        """Title the chat from its first user message. Failures are logged and swallowed."""
        try:
            first = ChatService(db).first_user_message(chat_id)
            if first is None:
                return None
            with log_request(logger, f"title generation chat_id={chat_id}"):
                raw = await self.title_llm.generate(build_title_prompt(first.content))
            title = clean_title(raw)
            if not title:
                logger.warning("title generation returned nothing usable chat_id=%s", chat_id)
                return None
            ChatService(db).rename_chat(chat_id, title)
            logger.info("chat titled chat_id=%s title=%r", chat_id, title)
            return title
        except Exception:
            logger.exception("title generation failed chat_id=%s", chat_id)
            return None

    def _store_fallback(self, db: DBSession, chat_id: str) -> Message:
        return ChatService(db).append_message(chat_id, "assistant", FALLBACK_MESSAGE)
