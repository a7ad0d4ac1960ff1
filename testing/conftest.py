"""Shared fixtures: an in-memory database and a scripted LLM client."""

from typing import List, Dict, Optional

import pytest

from salon_engine.db import Database
from salon_engine.llm.base import LLMResponse, LLMError
from salon_engine.repositories.user_repository import UserRepository


class FakeLLMClient:
    """
    Stands in for a provider client.

    Records every message list it is sent and answers with the next
    scripted reply. A reply may be a string, None (no completion text) or
    an exception instance to raise.
    """

    def __init__(self, replies=None, healthy: bool = True):
        self.replies = list(replies or [])
        self.healthy = healthy
        self.calls: List[List[Dict[str, str]]] = []
        self.closed = False

    async def health_check(self) -> bool:
        return self.healthy

    async def generate_with_history(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        self.calls.append(messages)
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="fake-model", finish_reason="stop")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def database():
    """Fresh in-memory database with all tables created."""
    db = Database("sqlite:///:memory:")
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session_factory()
    yield session
    session.close()


@pytest.fixture
def alice(db_session):
    return UserRepository(db_session).upsert("alice")


@pytest.fixture
def bob(db_session):
    return UserRepository(db_session).upsert("bob")


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def failing_llm():
    return FakeLLMClient(replies=[LLMError("connection refused")])
