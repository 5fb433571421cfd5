from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from config.settings import get_settings


class RelayError(RuntimeError):
    """Base error for failures talking to the completion API."""


class MissingAPIKeyError(RelayError):
    pass


class CompletionError(RelayError):
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.detail = detail if detail is not None else message


def extract_content(data: Any) -> str:
    """Pull the reply text out of a chat-completions style response.

    Handles ``choices[0].message.content``, legacy ``choices[0].text`` and
    ``data[0].text`` layouts; anything else is returned as serialized JSON.
    """
    try:
        choices = data.get("choices") if isinstance(data, dict) else None
        if choices and isinstance(choices[0], dict):
            first = choices[0]
            if first.get("message"):
                return first["message"].get("content") or ""
            if first.get("text"):
                return first["text"]
        items = data.get("data") if isinstance(data, dict) else None
        if items and isinstance(items[0], dict) and items[0].get("text"):
            return items[0]["text"]
    except (AttributeError, IndexError, KeyError, TypeError):
        pass
    return json.dumps(data, ensure_ascii=False)


def _error_detail(exc: httpx.HTTPError) -> Any:
    if not isinstance(exc, httpx.HTTPStatusError):
        return str(exc) or exc.__class__.__name__
    response = exc.response
    try:
        return response.json()
    except ValueError:
        return response.text or str(exc)


def request_completion(
    messages: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    client: Optional[httpx.Client] = None,
) -> str:
    settings = get_settings()
    if not settings.yun_api_key:
        raise MissingAPIKeyError("Server: missing YUN_API_KEY in environment")

    payload = {
        "model": model or settings.default_model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.yun_api_key}",
    }

    try:
        if client is None:
            with httpx.Client(timeout=settings.request_timeout) as own_client:
                response = own_client.post(settings.yun_api_url, json=payload, headers=headers)
        else:
            response = client.post(settings.yun_api_url, json=payload, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise CompletionError(f"Completion API call failed: {exc}", _error_detail(exc)) from exc
    except ValueError as exc:
        raise CompletionError("Completion API returned a non-JSON body", response.text) from exc

    return extract_content(data)
