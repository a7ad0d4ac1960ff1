"""
Tests for the HTTP API.

The app runs against an in-memory database and a scripted LLM client.
"""

import pytest
from fastapi.testclient import TestClient

from salon_engine.api.app import create_app
from salon_engine.config.models import SystemConfig
from salon_engine.llm.base import LLMError
from salon_engine.utils.debug_logger import DebugLogger

from conftest import FakeLLMClient

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def client(database, llm, tmp_path):
    app = create_app(
        system_config=SystemConfig(),
        database=database,
        llm_client=llm,
        debug_logger=DebugLogger(debug_dir=tmp_path, enabled=True),
    )
    with TestClient(app) as test_client:
        yield test_client


def create_character(client, headers=ALICE, **fields):
    body = {"name": "Einstein", "system_prompt": "You are Einstein"}
    body.update(fields)
    response = client.post("/characters", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()


class TestHealthAndAuth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "llm_available": True}

    def test_missing_identity_header(self, client):
        assert client.get("/characters").status_code == 401

    def test_me_upserts_user(self, client):
        first = client.get("/auth/me", headers=ALICE).json()
        second = client.get("/auth/me", headers=ALICE).json()

        assert first["open_id"] == "alice"
        assert first["role"] == "user"
        assert first["id"] == second["id"]


class TestCharacterRoutes:
    """Test suite for character and knowledge endpoints."""

    def test_crud(self, client):
        character = create_character(client, description="Physicist")

        response = client.patch(f"/characters/{character['id']}", json={"is_public": True}, headers=ALICE)
        assert response.status_code == 200
        assert response.json()["is_public"] is True
        assert response.json()["description"] == "Physicist"

        assert client.get(f"/characters/{character['id']}", headers=BOB).status_code == 200
        assert client.delete(f"/characters/{character['id']}", headers=BOB).status_code == 404
        assert client.delete(f"/characters/{character['id']}", headers=ALICE).status_code == 200
        assert client.get(f"/characters/{character['id']}", headers=ALICE).status_code == 404

    def test_private_character_hidden(self, client):
        character = create_character(client)

        response = client.get(f"/characters/{character['id']}", headers=BOB)

        assert response.status_code == 404
        assert response.json()["detail"] == "Character not found or unauthorized"
        assert client.get("/characters", headers=BOB).json() == []

    def test_blank_name_is_422(self, client):
        response = client.post("/characters", json={"name": " ", "system_prompt": "x"}, headers=ALICE)

        assert response.status_code == 422
        assert response.json()["field"] == "name"

    def test_knowledge(self, client):
        character = create_character(client)
        url = f"/characters/{character['id']}/knowledge"

        response = client.post(url, json={"title": "Relativity", "content": "E=mc^2", "metadata": {"year": 1905}}, headers=ALICE)
        assert response.status_code == 200
        entry = response.json()
        assert entry["metadata"] == {"year": 1905}

        assert [e["title"] for e in client.get(url, headers=ALICE).json()] == ["Relativity"]
        assert client.get(url, headers=BOB).status_code == 404
        assert client.delete(f"{url}/{entry['id']}", headers=ALICE).status_code == 200
        assert client.get(url, headers=ALICE).json() == []


class TestConversationRoutes:
    """Test suite for conversation endpoints."""

    def test_send_message(self, client, llm):
        character = create_character(client)
        client.post(
            f"/characters/{character['id']}/knowledge",
            json={"title": "Relativity", "content": "E=mc^2"},
            headers=ALICE,
        )
        conversation = client.post("/conversations", json={"character_id": character["id"]}, headers=ALICE).json()
        llm.replies = ["E equals m c squared."]

        response = client.post(
            f"/conversations/{conversation['id']}/messages",
            json={"content": "tell me about relativity"},
            headers=ALICE,
        )

        assert response.status_code == 200
        assert response.json() == {"content": "E equals m c squared."}
        assert llm.calls[0][0]["content"] == "You are Einstein\n\nRelevant knowledge:\nRelativity: E=mc^2"

        messages = client.get(f"/conversations/{conversation['id']}/messages", headers=ALICE).json()
        assert [(m["role"], m["content"]) for m in messages] == [
            ("user", "tell me about relativity"),
            ("assistant", "E equals m c squared."),
        ]

    def test_llm_failure_is_502_and_keeps_user_message(self, client, llm):
        character = create_character(client)
        conversation = client.post("/conversations", json={"character_id": character["id"]}, headers=ALICE).json()
        llm.replies = [LLMError("upstream said no: secret details")]

        response = client.post(
            f"/conversations/{conversation['id']}/messages",
            json={"content": "hello"},
            headers=ALICE,
        )

        assert response.status_code == 502
        assert "secret" not in response.text
        messages = client.get(f"/conversations/{conversation['id']}/messages", headers=ALICE).json()
        assert [m["content"] for m in messages] == ["hello"]

    def test_conversations_private(self, client):
        character = create_character(client, is_public=True)
        conversation = client.post(
            "/conversations", json={"character_id": character["id"], "title": "Physics"}, headers=BOB
        ).json()

        assert conversation["title"] == "Physics"
        assert client.get(f"/conversations/{conversation['id']}", headers=ALICE).status_code == 404
        assert client.post(
            f"/conversations/{conversation['id']}/messages", json={"content": "hi"}, headers=ALICE
        ).status_code == 404
        assert [c["id"] for c in client.get("/conversations", headers=BOB).json()] == [conversation["id"]]
        assert client.delete(f"/conversations/{conversation['id']}", headers=BOB).status_code == 200
        assert client.get("/conversations", headers=BOB).json() == []

    def test_debug_log(self, client, llm):
        character = create_character(client)
        conversation = client.post("/conversations", json={"character_id": character["id"]}, headers=ALICE).json()
        client.post(f"/conversations/{conversation['id']}/messages", json={"content": "hi"}, headers=ALICE)
        url = f"/debug/conversations/{conversation['id']}"

        log = client.get(url, headers=ALICE).json()
        assert len(log["interactions"]) == 1
        assert client.get(url, headers=BOB).status_code == 404

        assert client.delete(url, headers=ALICE).status_code == 200
        assert client.get(url, headers=ALICE).json()["interactions"] == []


class TestGroupChatRoutes:
    """Test suite for group chat endpoints."""

    def make_group(self, client):
        kant = create_character(client, name="Kant", system_prompt="You are Kant")
        mill = create_character(client, name="Mill", system_prompt="You are Mill")
        response = client.post(
            "/group-chats",
            json={"name": "Ethics night", "topic": "Ethics", "character_ids": [kant["id"], mill["id"]]},
            headers=ALICE,
        )
        assert response.status_code == 200
        return response.json(), kant, mill

    def test_get_includes_characters(self, client):
        group_chat, kant, mill = self.make_group(client)

        detail = client.get(f"/group-chats/{group_chat['id']}", headers=ALICE).json()

        assert detail["topic"] == "Ethics"
        assert [c["name"] for c in detail["characters"]] == ["Kant", "Mill"]
        assert client.get(f"/group-chats/{group_chat['id']}", headers=BOB).status_code == 404

    def test_needs_two_characters(self, client):
        kant = create_character(client, name="Kant")

        response = client.post("/group-chats", json={"name": "Solo", "character_ids": [kant["id"]]}, headers=ALICE)

        assert response.status_code == 422
        assert client.get("/group-chats", headers=ALICE).json() == []

    def test_discussion_turns(self, client, llm):
        group_chat, kant, mill = self.make_group(client)
        base = f"/group-chats/{group_chat['id']}"
        llm.replies = ["Never.", "It depends."]

        posted = client.post(f"{base}/messages", json={"content": "Is lying ever right?"}, headers=ALICE)
        assert posted.status_code == 200
        assert posted.json()["character_id"] is None

        first = client.post(f"{base}/responses", json={"character_id": kant["id"]}, headers=ALICE)
        second = client.post(f"{base}/responses", json={"character_id": mill["id"]}, headers=ALICE)

        assert first.json() == {"content": "Never."}
        assert second.json() == {"content": "It depends."}
        assert llm.calls[1][1:] == [
            {"role": "user", "content": "User: Is lying ever right?"},
            {"role": "user", "content": "Kant: Never."},
        ]

        messages = client.get(f"{base}/messages", headers=ALICE).json()
        assert [m["character_id"] for m in messages] == [None, kant["id"], mill["id"]]

    def test_delete(self, client):
        group_chat, _, _ = self.make_group(client)

        assert client.delete(f"/group-chats/{group_chat['id']}", headers=BOB).status_code == 404
        assert client.delete(f"/group-chats/{group_chat['id']}", headers=ALICE).status_code == 200
        assert client.get(f"/group-chats/{group_chat['id']}/messages", headers=ALICE).status_code == 404

    def test_debug_log(self, client, llm):
        group_chat, kant, _ = self.make_group(client)
        url = f"/debug/group-chats/{group_chat['id']}"
        client.post(f"/group-chats/{group_chat['id']}/responses", json={"character_id": kant["id"]}, headers=ALICE)

        log = client.get(url, headers=ALICE).json()
        assert [i["type"] for i in log["interactions"]] == ["group_chat"]
        assert client.get(url, headers=BOB).status_code == 404
        assert client.delete(url, headers=BOB).status_code == 404

        assert client.delete(url, headers=ALICE).status_code == 200
        assert client.get(url, headers=ALICE).json()["interactions"] == []
