import pytest
from fastapi.testclient import TestClient

from cordai.main import create_app


@pytest.fixture
def client(test_settings, price_provider, balance_provider):
    app = create_app(test_settings, price_provider=price_provider, balance_provider=balance_provider)
    return TestClient(app)


def test_list_requires_user_id(client):
    response = client.get("/conversations")

    assert response.status_code == 400
    assert response.json() == {"error": "User ID required"}


def test_upsert_then_list_round_trip(client):
    created = client.post("/conversations", json={"userId": "u1", "conversation": {"id": "c1", "title": "Price talk"}})

    assert created.status_code == 200
    body = created.json()
    assert body["success"] is True
    assert body["conversation"]["id"] == "c1"
    assert body["conversation"]["lastMessageAt"]

    listed = client.get("/conversations", params={"userId": "u1"}).json()
    assert [c["id"] for c in listed] == ["c1"]
    assert listed[0]["title"] == "Price talk"
    assert listed[0]["lastReadAt"]


def test_upsert_missing_fields(client):
    response = client.post("/conversations", json={"userId": "u1"})

    assert response.status_code == 400
    assert response.json() == {"error": "User ID and conversation required"}


def test_upsert_rejects_unknown_fields(client):
    response = client.post("/conversations", json={"userId": "u1", "conversation": {"id": "c1", "pinned": True}})

    assert response.status_code == 400
    assert "error" in response.json()


def test_delete_is_idempotent(client):
    client.post("/conversations", json={"userId": "u1", "conversation": {"id": "c1"}})

    first = client.request("DELETE", "/conversations", json={"userId": "u1", "conversationId": "c1"})
    second = client.request("DELETE", "/conversations", json={"userId": "u1", "conversationId": "c1"})

    assert first.json() == {"success": True}
    assert second.json() == {"success": True}
    assert client.get("/conversations", params={"userId": "u1"}).json() == []


def test_delete_missing_fields(client):
    response = client.request("DELETE", "/conversations", json={"userId": "u1"})

    assert response.status_code == 400
    assert response.json() == {"error": "User ID and conversation ID required"}
