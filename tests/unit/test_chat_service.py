"""Unit tests for ChatService against an in-memory SQLite session."""
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from api.errors import NotFoundError, StorageError, ValidationError
from api.models.models import Chat, Message
from api.services.chat_service import ChatService


@pytest.fixture
def chats(db_session):
    return ChatService(db_session)


@pytest.mark.unit
class TestChatLifecycle:
    def test_create_requires_tutor_id(self, chats):
        with pytest.raises(ValidationError) as exc:
            chats.create_chat(None)
        assert exc.value.message == "tutorId is required"
        with pytest.raises(ValidationError):
            chats.create_chat("  ")

    def test_create_unknown_tutor(self, chats):
        with pytest.raises(NotFoundError):
            chats.create_chat("no-such-tutor")

    def test_create_sets_timestamps(self, chats, newton):
        chat = chats.create_chat(newton.id)
        assert chat.tutor_id == newton.id
        assert chat.title is None
        assert chat.created_at == chat.updated_at

    def test_get_missing_chat(self, chats):
        with pytest.raises(NotFoundError):
            chats.get_chat("missing")

    def test_list_sorted_by_recent_activity(self, chats, newton, db_session):
        older = chats.create_chat(newton.id)
        newer = chats.create_chat(newton.id)
        # Make the older chat the most recently active one.
        older.updated_at = newer.updated_at + timedelta(seconds=5)
        db_session.commit()
        assert [c.id for c in chats.list_chats(newton.id)] == [older.id, newer.id]

    def test_list_unknown_tutor_is_empty(self, chats):
        assert chats.list_chats("nobody") == []

    def test_rename_only_changes_title(self, chats, newton):
        chat = chats.create_chat(newton.id)
        before = chat.updated_at
        chats.rename_chat(chat.id, "Limits and continuity")
        refreshed = chats.get_chat(chat.id)
        assert refreshed.title == "Limits and continuity"
        assert refreshed.updated_at == before

    def test_rename_missing_chat(self, chats):
        with pytest.raises(NotFoundError):
            chats.rename_chat("missing", "x")

    def test_delete_cascades_to_messages(self, chats, newton, db_session):
        chat = chats.create_chat(newton.id)
        other = chats.create_chat(newton.id)
        for i in range(3):
            chats.append_message(chat.id, "user", f"q{i}")
        chats.append_message(other.id, "user", "keep me")

        assert chats.delete_chat(chat.id) == 3
        assert db_session.get(Chat, chat.id) is None
        assert db_session.query(Message).filter(Message.chat_id == chat.id).count() == 0
        assert [m.content for m in chats.list_messages(other.id)] == ["keep me"]

    def test_delete_missing_chat(self, chats):
        with pytest.raises(NotFoundError):
            chats.delete_chat("missing")

    def test_delete_rolls_back_when_commit_fails(self, chats, newton, db_session):
        chat = chats.create_chat(newton.id)
        chats.append_message(chat.id, "user", "hello")
        with patch.object(db_session, "commit", side_effect=OperationalError("DELETE", {}, Exception("disk I/O error"))):
            with pytest.raises(StorageError) as exc:
                chats.delete_chat(chat.id)
        assert exc.value.message == "Failed to delete chat"
        # Neither the chat nor its messages were removed.
        assert db_session.get(Chat, chat.id) is not None
        assert len(chats.list_messages(chat.id)) == 1


@pytest.mark.unit
class TestMessages:
    def test_append_advances_updated_at(self, chats, newton):
        chat = chats.create_chat(newton.id)
        previous = chat.updated_at
        for content in ("one", "two", "three"):
            chats.append_message(chat.id, "user", content)
            current = chats.get_chat(chat.id).updated_at
            assert current >= previous
            previous = current

    def test_touch_never_moves_backwards(self, chats, newton):
        chat = chats.create_chat(newton.id)
        latest = chat.updated_at
        chats.touch_chat(chat, latest - timedelta(minutes=1))
        assert chat.updated_at == latest

    def test_append_to_missing_chat(self, chats):
        with pytest.raises(NotFoundError):
            chats.append_message("missing", "user", "hi")

    def test_append_rejects_unknown_role(self, chats, newton):
        chat = chats.create_chat(newton.id)
        with pytest.raises(ValueError):
            chats.append_message(chat.id, "system", "nope")

    def test_list_in_creation_order(self, chats, newton):
        chat = chats.create_chat(newton.id)
        for i in range(6):
            chats.append_message(chat.id, "user" if i % 2 == 0 else "assistant", f"m{i}")
        msgs = chats.list_messages(chat.id)
        assert [m.content for m in msgs] == [f"m{i}" for i in range(6)]
        stamps = [m.created_at for m in msgs]
        assert stamps == sorted(stamps)

    def test_list_requires_chat_id(self, chats):
        with pytest.raises(ValidationError) as exc:
            chats.list_messages("")
        assert exc.value.message == "chatId is required"

    def test_clear_returns_count(self, chats, newton):
        chat = chats.create_chat(newton.id)
        for i in range(5):
            chats.append_message(chat.id, "user", f"m{i}")
        assert chats.clear_messages(chat.id) == 5
        assert chats.list_messages(chat.id) == []
        # The chat itself survives.
        assert chats.get_chat(chat.id).id == chat.id

    def test_truncate_after_keeps_pivot(self, chats, newton):
        chat = chats.create_chat(newton.id)
        first = chats.append_message(chat.id, "user", "q1")
        chats.append_message(chat.id, "assistant", "a1")
        chats.append_message(chat.id, "user", "q2")
        chats.truncate_after(chat.id, first.id)
        assert [m.content for m in chats.list_messages(chat.id)] == ["q1"]

    def test_truncate_after_rejects_assistant_pivot(self, chats, newton):
        chat = chats.create_chat(newton.id)
        chats.append_message(chat.id, "user", "q1")
        answer = chats.append_message(chat.id, "assistant", "a1")
        chats.append_message(chat.id, "user", "q2")
        with pytest.raises(ValidationError, match="user message"):
            chats.truncate_after(chat.id, answer.id)
        assert [m.content for m in chats.list_messages(chat.id)] == ["q1", "a1", "q2"]

    def test_truncate_after_unknown_message(self, chats, newton):
        chat = chats.create_chat(newton.id)
        with pytest.raises(NotFoundError):
            chats.truncate_after(chat.id, "missing")

    def test_first_user_message(self, chats, newton):
        chat = chats.create_chat(newton.id)
        assert chats.first_user_message(chat.id) is None
        chats.append_message(chat.id, "user", "What is a derivative?")
        chats.append_message(chat.id, "assistant", "...")
        chats.append_message(chat.id, "user", "And an integral?")
        assert chats.first_user_message(chat.id).content == "What is a derivative?"
