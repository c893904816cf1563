"""
Chat service: chat lifecycle (create, get, list, rename, delete with cascade) and
message lifecycle (append, list, clear, truncate) over the SQL store.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy.orm import Session as DBSession

from api.errors import NotFoundError, ValidationError, require
from api.models.models import Chat, Message, Tutor, utcnow
from api.utils.common import next_seq, storage_guard
from api.utils.logger import configure_logging

logger = configure_logging()

ROLES = ("user", "assistant")


class ChatService:
    """Typed access to chats and their messages. Every public method commits or rolls back."""

    def __init__(self, db: DBSession):
        self.db = db

    # ---- chats ----

    def create_chat(self, tutor_id: str | None) -> Chat:
        require(tutor_id, "tutorId")
        with storage_guard(self.db, "create chat"):
            if self.db.get(Tutor, tutor_id) is None:
                raise NotFoundError("Tutor not found")
            now = utcnow()
            chat = Chat(id=str(uuid4()), tutor_id=tutor_id, created_at=now, updated_at=now)
            self.db.add(chat)
            self.db.commit()
            self.db.refresh(chat)
        logger.info("chat created chat_id=%s tutor_id=%s", chat.id, tutor_id)
        return chat

    def get_chat(self, chat_id: str) -> Chat:
        with storage_guard(self.db, "fetch chat"):
            chat = self.db.get(Chat, chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    def list_chats(self, tutor_id: str | None) -> list[Chat]:
        """Chats of a tutor, most recently active first."""
        require(tutor_id, "tutorId")
        with storage_guard(self.db, "fetch chats"):
            return (
                self.db.query(Chat)
                .filter(Chat.tutor_id == tutor_id)
                .order_by(Chat.updated_at.desc())
                .all()
            )

    def rename_chat(self, chat_id: str, title: str | None) -> Chat:
        # Only the title changes; updated_at tracks message activity.
        with storage_guard(self.db, "update chat"):
            chat = self.db.get(Chat, chat_id)
            if chat is None:
                raise NotFoundError("Chat not found")
            chat.title = title
            self.db.commit()
        return chat

    def delete_chat(self, chat_id: str) -> int:
        """
        Delete a chat and every message it owns in one transaction.
        Returns the number of messages removed.
        """
        with storage_guard(self.db, "delete chat"):
            chat = self.db.get(Chat, chat_id)
            if chat is None:
                raise NotFoundError("Chat not found")
            removed = (
                self.db.query(Message)
                .filter(Message.chat_id == chat_id)
                .delete(synchronize_session=False)
            )
            self.db.delete(chat)
            self.db.commit()
        logger.info("chat deleted chat_id=%s messages=%s", chat_id, removed)
        return removed

    def mark_active(self, chat_id: str) -> Chat:
        """Refresh updated_at of a chat that received activity without a new message."""
        with storage_guard(self.db, "update chat"):
            chat = self.db.get(Chat, chat_id)
            if chat is None:
                raise NotFoundError("Chat not found")
            self.touch_chat(chat)
            self.db.commit()
        return chat

    def touch_chat(self, chat: Chat, at: datetime | None = None) -> None:
        """Advance updated_at without ever moving it backwards. Caller commits."""
        at = at or utcnow()
        if chat.updated_at is None or at > chat.updated_at:
            chat.updated_at = at

    # ---- messages ----

    def append_message(self, chat_id: str, role: str, content: str) -> Message:
        """Persist one message and refresh the owning chat's activity timestamp in the same commit."""
        if role not in ROLES:
            raise ValueError(f"unknown role: {role!r}")
        with storage_guard(self.db, "create message"):
            chat = self.db.get(Chat, chat_id)
            if chat is None:
                raise NotFoundError("Chat not found")
            now = utcnow()
            message = Message(
                id=str(uuid4()),
                chat_id=chat_id,
                role=role,
                content=content,
                seq=next_seq(chat_id, self.db),
                created_at=now,
            )
            self.db.add(message)
            self.touch_chat(chat, now)
            self.db.commit()
            self.db.refresh(message)
        return message

    def list_messages(self, chat_id: str | None) -> list[Message]:
        """Messages of a chat in conversation order (created_at, then seq)."""
        require(chat_id, "chatId")
        with storage_guard(self.db, "fetch messages"):
            return (
                self.db.query(Message)
                .filter(Message.chat_id == chat_id)
                .order_by(Message.created_at.asc(), Message.seq.asc())
                .all()
            )

    def count_messages(self, chat_id: str) -> int:
        with storage_guard(self.db, "count messages"):
            return self.db.query(Message).filter(Message.chat_id == chat_id).count()

    def first_user_message(self, chat_id: str) -> Message | None:
        with storage_guard(self.db, "fetch messages"):
            return (
                self.db.query(Message)
                .filter(Message.chat_id == chat_id, Message.role == "user")
                .order_by(Message.created_at.asc(), Message.seq.asc())
                .first()
            )

    def clear_messages(self, chat_id: str | None) -> int:
        require(chat_id, "chatId")
        with storage_guard(self.db, "delete messages"):
            removed = (
                self.db.query(Message)
                .filter(Message.chat_id == chat_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        logger.info("messages cleared chat_id=%s count=%s", chat_id, removed)
        return removed

    def get_message(self, chat_id: str, message_id: str) -> Message:
        with storage_guard(self.db, "fetch message"):
            message = (
                self.db.query(Message)
                .filter(Message.id == message_id, Message.chat_id == chat_id)
                .first()
            )
        if message is None:
            raise NotFoundError("Message not found")
        return message

    def truncate_after(self, chat_id: str, message_id: str, content: str | None = None) -> Message:
        """
        Drop every message that follows message_id in conversation order; the pivot stays.
        Used by rerun so the stored history matches what the user still sees.
        The pivot must be a user turn, and must carry `content` when it is given.
        """
        pivot = self.get_message(chat_id, message_id)
        if pivot.role != "user":
            raise ValidationError("messageId must reference a user message")
        if content is not None and pivot.content != content:
            raise ValidationError("content does not match the message being rerun")
        with storage_guard(self.db, "truncate messages"):
            removed = (
                self.db.query(Message)
                .filter(Message.chat_id == chat_id, Message.seq > pivot.seq)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        logger.info("messages truncated chat_id=%s after=%s count=%s", chat_id, message_id, removed)
        return pivot
