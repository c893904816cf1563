"""
Integration test fixtures. TestClient with get_db pointed at an in-memory DB and a scripted relay.
"""
import pytest


@pytest.fixture
def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def relay(fake_llm):
    from api.services.completion_relay import CompletionRelay

    return CompletionRelay(llm=fake_llm)


@pytest.fixture
def api_client(override_get_db, relay):
    """FastAPI TestClient with in-memory DB and the fake completion provider."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.config import get_db

    app.dependency_overrides[get_db] = override_get_db
    app.state.relay = relay
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    app.state.relay = None


@pytest.fixture
def seeded_tutors(api_client):
    """Seed the defaults through the API and return them keyed by name."""
    assert api_client.get("/seed").status_code == 200
    return {t["name"]: t for t in api_client.get("/tutors").json()}
