from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, TypeVar

from ..core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class JsonFileStore:
    """A JSON document on disk guarded by a process-wide lock.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so readers never see a half-written file.
    """

    def __init__(self, path: str | os.PathLike, *, default: Callable[[], Any]):
        self._path = Path(path)
        self._default = default
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_unlocked(self) -> Any:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self._default()
        if not raw.strip():
            return self._default()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt JSON in {}: {}", self._path, e)
            raise

    def _write_unlocked(self, data: Any) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(data, tmp, indent=2, ensure_ascii=False)
            tmp_name = tmp.name
        os.replace(tmp_name, self._path)

    def read(self) -> Any:
        with self._lock:
            return self._read_unlocked()

    def write(self, data: Any) -> None:
        with self._lock:
            self._write_unlocked(data)

    def update(self, mutate: Callable[[Any], T]) -> T:
        """Read, mutate in place, write back; all under the lock. Returns ``mutate``'s result."""
        with self._lock:
            data = self._read_unlocked()
            result = mutate(data)
            self._write_unlocked(data)
            return result
