import pytest

from config.settings import get_settings


@pytest.fixture
def settings(monkeypatch, tmp_path):
    s = get_settings()
    monkeypatch.setattr(s, "yun_api_key", "test-key")
    monkeypatch.setattr(s, "yun_api_url", "https://llm.example.test/v1/chat/completions")
    monkeypatch.setattr(s, "default_model", "o4-mini")
    monkeypatch.setattr(s, "sessions_dir", tmp_path / "sessions")
    return s
