"""JSON-file key/value store used by the client for session-scoped state."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

ONBOARDING_AUTH_KEY = "onboarding_auth"
ONBOARDING_STATE_KEY = "onboarding_state"


class LocalStore:
    def __init__(self, path: str | os.PathLike):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, sort_keys=True)
        os.replace(tmp, self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)

    def update(self, key: str, **fields: Any) -> dict:
        current = self.get(key) or {}
        current.update(fields)
        self.set(key, current)
        return current

    def get_auth(self) -> Optional[dict]:
        auth = self.get(ONBOARDING_AUTH_KEY)
        if isinstance(auth, dict) and auth.get("userId"):
            return auth
        return None
