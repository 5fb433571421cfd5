import json

import pytest
from fastapi.testclient import TestClient

import app.main as main
from relay.completion import CompletionError
from relay.core.prompt import SYSTEM_PROMPT


@pytest.fixture
def client(settings):
    return TestClient(main.app)


@pytest.fixture
def fake_completion(monkeypatch):
    calls = []

    def fake(messages, model=None, **params):
        calls.append({"messages": messages, "model": model, **params})
        return fake.reply

    fake.reply = "\\frac{1}{2}"
    fake.calls = calls
    monkeypatch.setattr(main, "request_completion", fake)
    return fake


def test_translate_wraps_bare_latex(client, fake_completion):
    resp = client.post("/api/translate", json={"text": "Compute 1/2"})

    assert resp.status_code == 200
    assert resp.json() == {"result": "$$\n\\frac{1}{2}\n$$"}
    call = fake_completion.calls[0]
    assert call["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Compute 1/2"},
    ]
    assert call["model"] is None
    assert call["temperature"] == 0.1
    assert call["max_tokens"] == 32767


def test_translate_requires_text(client, fake_completion):
    assert client.post("/api/translate", json={}).status_code == 400
    assert client.post("/api/translate", json={"text": ""}).status_code == 400
    assert fake_completion.calls == []


def test_translate_reports_provider_failure(client, monkeypatch):
    def boom(messages, model=None, **params):
        raise CompletionError("failed", {"error": "quota"})

    monkeypatch.setattr(main, "request_completion", boom)
    resp = client.post("/api/translate", json={"text": "x"})

    assert resp.status_code == 500
    assert resp.json()["detail"] == {"error": "Translation failed", "detail": {"error": "quota"}}


def test_translate_without_api_key(client, settings, monkeypatch):
    monkeypatch.setattr(settings, "yun_api_key", None)
    resp = client.post("/api/translate", json={"text": "x"})

    assert resp.status_code == 500
    assert "YUN_API_KEY" in resp.json()["detail"]


def test_chat_persists_request_messages_not_reply(client, fake_completion, settings):
    messages = [{"role": "user", "content": "What is \\pi?"}]
    resp = client.post(
        "/api/chat",
        json={"messages": messages, "model": "gpt-4o", "sessionId": "room-1"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"result": "$$\n\\frac{1}{2}\n$$"}
    call = fake_completion.calls[0]
    assert call["model"] == "gpt-4o"
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 2048

    stored = json.loads((settings.sessions_dir / "room-1.json").read_text(encoding="utf-8"))
    assert stored == messages


def test_chat_leaves_dollar_delimited_reply_alone(client, fake_completion, settings):
    fake_completion.reply = "The value is $x^2$."
    resp = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert resp.json() == {"result": "The value is $x^2$."}
    assert not settings.sessions_dir.exists()


def test_chat_requires_messages(client, fake_completion):
    assert client.post("/api/chat", json={"messages": []}).status_code == 400
    assert client.post("/api/chat", json={}).status_code == 400


def test_session_endpoints_round_trip(client, settings):
    messages = [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]

    assert client.get("/api/sessions/s-9").json() == []
    assert client.post("/api/sessions/s-9", json=messages).json() == {"ok": True}
    assert client.get("/api/sessions/s-9").json() == messages
    assert client.post("/api/sessions/s-9/clear").json() == {"ok": True}
    assert client.get("/api/sessions/s-9").json() == []


def test_models_endpoint(client, settings, monkeypatch, tmp_path):
    models_file = tmp_path / "models.json"
    models_file.write_text(json.dumps([{"id": "o4-mini"}]), encoding="utf-8")
    monkeypatch.setattr(settings, "models_file", models_file)
    assert client.get("/api/models").json() == [{"id": "o4-mini"}]

    monkeypatch.setattr(settings, "models_file", tmp_path / "missing.json")
    resp = client.get("/api/models")
    assert resp.status_code == 500
    assert resp.json() == []


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_normalization_failure_returns_raw_reply(client, fake_completion, monkeypatch):
    def broken(text):
        raise RuntimeError("boom")

    monkeypatch.setattr(main, "wrap_latex_if_needed", broken)
    resp = client.post("/api/translate", json={"text": "x"})

    assert resp.status_code == 200
    assert resp.json() == {"result": "\\frac{1}{2}"}


def test_chat_forwards_and_stores_messages_as_sent(client, fake_completion, settings):
    messages = [
        {
            "role": "user",
            "content": [{"type": "text", "text": "hi"}],
            "name": "alice",
        }
    ]
    resp = client.post("/api/chat", json={"messages": messages, "sessionId": "mm"})

    assert resp.status_code == 200
    assert fake_completion.calls[0]["messages"] == messages
    stored = json.loads((settings.sessions_dir / "mm.json").read_text(encoding="utf-8"))
    assert stored == messages
