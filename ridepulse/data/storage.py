"""Key-value persistence for the dashboard state that survives restarts."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
import threading
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "ridepulse-storage"


class StateStorage(Protocol):
    """Anything that can load and save the persisted state mapping."""

    def load(self) -> dict[str, Any]: ...

    def save(self, state: dict[str, Any]) -> None: ...


class MemoryStorage:
    """In-process storage, mostly for tests."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._state: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.save_count = 0

    def load(self) -> dict[str, Any]:
        return copy.deepcopy(self._state)

    def save(self, state: dict[str, Any]) -> None:
        self._state = copy.deepcopy(state)
        self.save_count += 1


class JsonFileStorage:
    """Stores state as JSON under a namespace key inside a single file.

    Other namespaces in the same file are preserved on save. Writes go to a
    temporary file that replaces the original, so a crash mid-write leaves the
    previous contents intact.
    """

    def __init__(self, path: str | Path, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._path = Path(path)
        self._namespace = namespace
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        with self._lock:
            document = self._read_document()
        state = document.get(self._namespace, {})
        if not isinstance(state, dict):
            logger.warning("Ignoring non-mapping state under %s in %s", self._namespace, self._path)
            return {}
        return state

    def save(self, state: dict[str, Any]) -> None:
        with self._lock:
            document = self._read_document()
            document[self._namespace] = state
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False)
            os.replace(tmp_path, self._path)

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read state file %s: %s", self._path, exc)
            return {}
        if not isinstance(document, dict):
            logger.warning("State file %s does not contain a mapping", self._path)
            return {}
        return document


__all__ = ["DEFAULT_NAMESPACE", "JsonFileStorage", "MemoryStorage", "StateStorage"]
