import json

import pytest
from fastapi.testclient import TestClient

from cordai.main import create_app

WALLET = "So11111111111111111111111111111111111111112"


def _sse_events(text: str):
    return [line[len("data: "):] for line in text.split("\n\n") if line.startswith("data: ")]


@pytest.fixture
def make_client(test_settings, price_provider, balance_provider):
    def _make(llm=None, **overrides):
        settings = test_settings.model_copy(update=overrides)
        app = create_app(settings, llm_provider=llm, price_provider=price_provider, balance_provider=balance_provider)
        return TestClient(app)
    return _make


def _chat_body(content="hi", **extra):
    body = {"id": "conv-1", "message": {"role": "user", "content": content}, "userId": WALLET}
    body.update(extra)
    return body


def test_chat_streams_sse_frames(make_client, llm_factory):
    client = make_client(llm_factory([{"text": ["Hel", "lo"]}]))

    response = client.post("/chat", json=_chat_body())

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = _sse_events(response.text)
    assert events[-1] == "[DONE]"
    frames = [json.loads(e) for e in events[:-1]]
    assert [f["delta"] for f in frames if f["type"] == "text-delta"] == ["Hel", "lo"]
    assert frames[-1]["type"] == "finish"


def test_chat_data_stream_protocol(make_client, llm_factory):
    client = make_client(llm_factory([{"text": ["Hi"]}]), chat_stream_protocol="data-stream")

    response = client.post("/chat", json=_chat_body())

    assert response.status_code == 200
    assert response.headers["x-vercel-ai-data-stream"] == "v1"
    lines = response.text.splitlines()
    assert lines[0] == '0:"Hi"'
    assert lines[-1].startswith("d:")


def test_chat_upstream_failure_stays_200_with_one_error_frame(make_client, llm_factory):
    from cordai.providers.llm.base import LLMProviderError

    client = make_client(llm_factory([{"text": ["Hel"], "error": LLMProviderError("boom")}]))

    response = client.post("/chat", json=_chat_body())

    assert response.status_code == 200
    frames = [json.loads(e) for e in _sse_events(response.text)[:-1]]
    errors = [f for f in frames if f["type"] == "error"]
    assert len(errors) == 1
    assert errors[0]["message"] == "An error occurred while processing your request. Please try again."
    assert "boom" not in response.text


@pytest.mark.parametrize(
    "body, status, text",
    [
        ({"id": "c", "userId": WALLET}, 400, "No message found"),
        ({"message": {"content": "x"}, "userId": WALLET}, 400, "Invalid message"),
        ({"message": {"role": "user", "content": "x"}}, 400, "User ID required"),
    ],
)
def test_chat_rejections_before_streaming(make_client, llm_factory, body, status, text):
    llm = llm_factory()
    client = make_client(llm)

    response = client.post("/chat", json=body)

    assert response.status_code == status
    assert response.text == text
    assert llm.calls == []


def test_chat_malformed_json(make_client, llm_factory):
    client = make_client(llm_factory())

    response = client.post("/chat", content=b"{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400


def test_chat_without_agent_returns_500(make_client):
    client = make_client(None)

    response = client.post("/chat", json=_chat_body())

    assert response.status_code == 500
    assert response.text == "Agent not configured"


def test_chat_direct_strategy(make_client, llm_factory):
    llm = llm_factory([{"text": ["direct"]}])
    client = make_client(llm, chat_strategy="direct")

    response = client.post("/chat", json=_chat_body())

    assert response.status_code == 200
    assert '"delta": "direct"' in response.text
    assert [m.role for m in llm.calls[0]] == ["system", "user"]


def test_chat_history_returns_persisted_turns(make_client, llm_factory):
    client = make_client(llm_factory([{"text": ["Your balance is 1.5 SOL"]}]))

    client.post("/chat", json=_chat_body("What's my balance?", id="thread-9"))
    history = client.get("/chat/thread-9", params={"userId": WALLET}).json()

    assert [m["role"] for m in history] == ["user", "assistant"]
    assert history[0]["content"].startswith("What's my balance?")
    assert history[1]["content"] == "Your balance is 1.5 SOL"
    assert "createdAt" in history[0]
    assert client.get("/chat/unknown", params={"userId": WALLET}).json() == []


def test_chat_history_is_private_to_the_owning_wallet(make_client, llm_factory):
    other = "Vote111111111111111111111111111111111111111"
    client = make_client(llm_factory([{"text": ["secret"]}, {"text": ["fresh"]}]))

    client.post("/chat", json=_chat_body("alice's question", id="shared-thread"))

    assert client.get("/chat/shared-thread", params={"userId": other}).json() == []
    assert client.get("/chat/shared-thread").json() == []

    client.post("/chat", json=_chat_body("bob's question", id="shared-thread", userId=other))
    bob_history = client.get("/chat/shared-thread", params={"userId": other}).json()
    assert [m["content"] for m in bob_history] == ["bob's question", "fresh"]
    assert len(client.get("/chat/shared-thread", params={"userId": WALLET}).json()) == 2
