"""
Pytest configuration and shared fixtures for the test suite.
Points the app at an in-memory database and provides a scripted completion provider.
"""
import os
import sys
import tempfile
from pathlib import Path
from typing import AsyncIterator, Sequence

# Must be set before api.config is imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LLM_PROVIDER", "ollama")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="tutor-chat-logs-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from infra.llm.base import LLM, PromptMessage  # noqa: E402


class ProviderDown(RuntimeError):
    pass


class FakeLLM(LLM):
    """
    Scripted provider. Streams `chunks` in order; can fail before the first chunk
    (fail_on_start) or right before chunk number `fail_after`.
    """

    def __init__(
        self,
        chunks: Sequence[str] = ("A derivative ", "measures ", "the rate of change."),
        title: str = "Understanding Derivatives in Calculus",
        fail_on_start: bool = False,
        fail_after: int | None = None,
        title_error: Exception | None = None,
    ):
        self.chunks = list(chunks)
        self.title = title
        self.fail_on_start = fail_on_start
        self.fail_after = fail_after
        self.title_error = title_error
        self.stream_calls: list[list[PromptMessage]] = []
        self.title_calls: list[list[PromptMessage]] = []

    @property
    def reply(self) -> str:
        return "".join(self.chunks)

    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        self.title_calls.append(list(messages))
        if self.title_error is not None:
            raise self.title_error
        return self.title

    async def stream(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        self.stream_calls.append(list(messages))
        if self.fail_on_start:
            raise ProviderDown("provider unavailable")
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise ProviderDown("connection reset")
            yield chunk


@pytest.fixture
def make_llm():
    """The FakeLLM class, for tests that need a differently scripted provider."""
    return FakeLLM


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def in_memory_engine():
    """One shared in-memory SQLite connection, usable from any thread."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def session_factory(in_memory_engine):
    import api.models  # noqa: F401
    from api.config import Base

    Base.metadata.create_all(in_memory_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def newton(db_session):
    """The Dr. Newton tutor, stored."""
    from api.models.models import Tutor

    tutor = Tutor(
        id="tutor-newton",
        name="Dr. Newton",
        subject="Mathematics",
        description="Mathematics expert with knowledge in calculus, algebra, and statistics.",
    )
    db_session.add(tutor)
    db_session.commit()
    return tutor
