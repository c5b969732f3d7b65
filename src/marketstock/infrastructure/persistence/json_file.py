"""A JSON array on disk, shared safely between threads of one process.

All ``JsonFile`` objects for the same path share one re-entrant lock.
Writes go to a temporary file in the same directory that then replaces
the original, so readers never observe a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def lock_for(file_path: Path) -> threading.RLock:
    key = file_path.resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self.path = file_path
        self.lock = lock_for(file_path)
        with self.lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.write([])

    def read(self) -> list[dict]:
        return json.loads(self.path.read_text(encoding="utf-8"))

    def write(self, records: list[dict]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(records, indent=2) + "\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise
