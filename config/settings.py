from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parents[1]

load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    app_env: str = os.getenv("APP_ENV", "development")
    yun_api_key: Optional[str] = os.getenv("YUN_API_KEY")
    yun_api_url: str = os.getenv(
        "YUN_API_URL", "https://yunwu.ai/v1/chat/completions"
    )
    default_model: str = os.getenv("DEFAULT_MODEL", "o4-mini")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "600"))
    sessions_dir: Path = Path(os.getenv("SESSIONS_DIR", PROJECT_ROOT / "sessions"))
    models_file: Path = Path(
        os.getenv("MODELS_FILE", PROJECT_ROOT / "config" / "models.json")
    )
    debug_log: bool = _env_flag("DEBUG_LOG") or _env_flag("DEBUG")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
