from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from api.config import Base


def utcnow() -> datetime:
    """Naive UTC; timestamps are serialized with a trailing Z."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Tutor(Base):
    __tablename__ = "tutors"
    id = Column(String, primary_key=True)  # uuid
    name = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")


class Chat(Base):
    __tablename__ = "chats"
    id = Column(String, primary_key=True)  # uuid
    # Reference by convention; tutors are never deleted through the chat API.
    tutor_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class Message(Base):
    __tablename__ = "messages"
    id = Column(String, primary_key=True)  # uuid
    chat_id = Column(String, nullable=False)
    role = Column(String, nullable=False)  # user|assistant
    content = Column(Text, nullable=False)
    # Tiebreaker for messages written within the same clock tick.
    seq = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("ix_messages_chat_order", "chat_id", "created_at", "seq"),)
