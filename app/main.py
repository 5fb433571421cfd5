from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from config.settings import get_settings
from relay.completion import CompletionError, MissingAPIKeyError, request_completion
from relay.core.latex import wrap_latex_if_needed
from relay.core.prompt import SYSTEM_PROMPT
from relay.core.sessions import get_session_store


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("relay")

settings = get_settings()
if settings.debug_log:
    logger.setLevel(logging.DEBUG)

logger.debug("YUN_API_KEY loaded: %s", "[REDACTED]" if settings.yun_api_key else "not found")

app = FastAPI(title="Problem Translation Relay", version="1.0.0")

# CORS: allow local frontend during development
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class ChatTurn(BaseModel):
    # Forwarded and stored as sent, including multimodal content and extra keys
    model_config = ConfigDict(extra="allow")

    role: str = Field(..., description="'system', 'user' or 'assistant'")
    content: Any


class TranslateRequest(BaseModel):
    text: Optional[str] = Field(None, description="Problem statement to translate")
    model: Optional[str] = Field(None, description="Model id, defaults to the server default")


class ChatRequest(BaseModel):
    messages: Optional[List[ChatTurn]] = Field(
        default=None,
        description="Full conversation so far, oldest first (frontend-managed)",
    )
    model: Optional[str] = None
    session_id: Optional[str] = Field(
        None, alias="sessionId", description="Persist the messages under this id"
    )


def _normalize(content: Any) -> Any:
    try:
        return wrap_latex_if_needed(content)
    except Exception:
        logger.exception("LaTeX normalization failed, returning raw content")
        return content


def _complete(messages: List[Dict[str, Any]], model: Optional[str], failure: str, **params: Any) -> str:
    try:
        return request_completion(messages, model=model, **params)
    except MissingAPIKeyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except CompletionError as e:
        logger.error("%s: %s", failure, e.detail)
        raise HTTPException(status_code=500, detail={"error": failure, "detail": e.detail})
    except Exception as e:
        logger.exception("%s: %s", failure, e)
        raise HTTPException(status_code=500, detail={"error": failure, "detail": str(e)})


@app.post("/api/translate")
def translate(req: TranslateRequest) -> Dict[str, Any]:
    if not req.text:
        raise HTTPException(status_code=400, detail="Missing text field")

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": req.text},
    ]
    logger.info("Incoming translate: model=%s text_len=%s", req.model or settings.default_model, len(req.text))
    content = _complete(
        messages, req.model, "Translation failed", temperature=0.1, max_tokens=32767
    )
    return {"result": _normalize(content)}


@app.post("/api/chat")
def chat(req: ChatRequest) -> Dict[str, Any]:
    if not req.messages:
        raise HTTPException(status_code=400, detail="Missing messages array")

    messages = [t.model_dump() for t in req.messages]
    logger.debug(
        "[/api/chat] received messages count: %s model: %s roles: %s",
        len(messages),
        req.model,
        [m["role"] for m in messages][:20],
    )

    content = _complete(messages, req.model, "Chat failed", temperature=0.2, max_tokens=2048)
    logger.debug("[/api/chat] assistant content preview: %s", str(content)[:400].replace("\n", " "))

    result = _normalize(content)
    if req.session_id:
        # Stores what the client sent, not the normalized reply
        get_session_store().save(req.session_id, messages)
    return {"result": result}


@app.get("/api/models")
def list_models():
    try:
        with open(get_settings().models_file, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        logger.debug("failed to read models file: %s", e)
        return JSONResponse(status_code=500, content=[])


@app.get("/api/sessions/{session_id}")
def get_session(session_id: str):
    return get_session_store().load(session_id)


@app.post("/api/sessions/{session_id}")
def save_session(session_id: str, messages: Optional[List[Dict[str, Any]]] = Body(None)) -> Dict[str, Any]:
    get_session_store().save(session_id, messages or [])
    return {"ok": True}


@app.post("/api/sessions/{session_id}/clear")
def clear_session(session_id: str) -> Dict[str, Any]:
    get_session_store().clear(session_id)
    return {"ok": True}


@app.get("/health")
def health():
    return {"status": "ok"}


def serve() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
