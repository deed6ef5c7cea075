from __future__ import annotations

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from app.core.errors import PersistenceError
from app.core.logging import store_logger


# -----------------------------------------------------------------------------
# 1) In-memory store (tests, ephemeral sessions)
# -----------------------------------------------------------------------------

class InMemoryStore:
    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


# -----------------------------------------------------------------------------
# 2) File store: one file per key inside a directory
# -----------------------------------------------------------------------------

_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]")


class FileStore:
    """Keys map to `<root>/<key>.json`; writes go through a temp file + os.replace."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key)
        if not safe:
            raise PersistenceError(f"Invalid store key: {key!r}")
        return self.root / f"{safe}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            store_logger.error("Store read failed", exc=exc, key=key, path=str(path))
            raise PersistenceError(f"Failed to read '{key}' from store", {"error": str(exc)}) from exc

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{path.stem}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            store_logger.error("Store write failed", exc=exc, key=key, path=str(path))
            raise PersistenceError("Failed to save data. Please try again.", {"error": str(exc)}) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            store_logger.error("Store delete failed", exc=exc, key=key, path=str(path))
            raise PersistenceError(f"Failed to delete '{key}' from store", {"error": str(exc)}) from exc
