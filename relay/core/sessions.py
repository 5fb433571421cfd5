"""Flat-file chat session storage.

Each session is one JSON file named after its id. The frontend posts the full
message list on every save, so the store never merges: last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config.settings import get_settings


logger = logging.getLogger("relay.sessions")

SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9_.-]*")


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# mkstemp creates 0600 files; sessions get the same mode a plain open() would give
SESSION_FILE_MODE = _default_file_mode()


class SessionStore:
    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def _path_for(self, session_id: Optional[str]) -> Optional[Path]:
        if not session_id or not SESSION_ID_PATTERN.fullmatch(session_id):
            return None
        return self.base_dir / f"{session_id}.json"

    def save(self, session_id: Optional[str], messages: Optional[List[Dict[str, Any]]]) -> None:
        if not session_id:
            return
        path = self._path_for(session_id)
        if path is None:
            logger.warning("Refusing to save session with invalid id: %r", session_id)
            return

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(messages or [], fh, ensure_ascii=False, indent=2)
                os.chmod(tmp_name, SESSION_FILE_MODE)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("save_session error for %s: %s", session_id, exc)

    def load(self, session_id: Optional[str]) -> List[Dict[str, Any]]:
        path = self._path_for(session_id)
        if path is None:
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return []
        if not isinstance(data, list):
            return []
        return data

    def clear(self, session_id: Optional[str]) -> None:
        path = self._path_for(session_id)
        if path is None:
            if session_id:
                logger.warning("Refusing to clear session with invalid id: %r", session_id)
            return
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("clear_session error for %s: %s", session_id, exc)


def get_session_store() -> SessionStore:
    return SessionStore(get_settings().sessions_dir)
