"""
Common utility functions used across services and routes.
"""

from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.errors import StorageError
from api.models.models import Message
from api.utils.logger import configure_logging

logger = configure_logging()


def iso_format(dt: datetime) -> str:
    """Format datetime as ISO string with Z suffix."""
    return dt.isoformat() + "Z"


def next_seq(chat_id: str, db: Session) -> int:
    """Get next sequence number for a chat."""
    last = db.query(func.max(Message.seq)).filter(Message.chat_id == chat_id).scalar()
    return int(last) + 1 if last is not None else 1


@contextmanager
def storage_guard(db: Session, action: str):
    """
    Run a unit of store work; any SQLAlchemy failure rolls the session back and
    surfaces as StorageError("Failed to <action>").
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("storage error action=%s", action)
        raise StorageError(f"Failed to {action}") from e
