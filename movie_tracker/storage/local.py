from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from urllib.parse import quote


class LocalStorageError(RuntimeError):
    pass


class LocalStorage:
    """
    String key-value store persisted as one JSON document per key under `root`.

    Values are opaque strings (callers serialize). Writes replace the file atomically so a
    crash mid-write never leaves a truncated value behind.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)
        self._lock = threading.Lock()

    def _path_for(self, key: str) -> Path:
        if not (key or "").strip():
            raise ValueError("Storage key is empty.")
        # Percent-encoding keeps distinct keys in distinct files.
        return self.root / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise LocalStorageError(f"Failed to read {path}: {exc}") from exc

        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(envelope, dict) or envelope.get("key") != key:
            return None
        value = envelope.get("value")
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        payload = json.dumps({"key": key, "value": str(value)}, ensure_ascii=False)
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except OSError as exc:
                raise LocalStorageError(f"Failed to write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return
            except OSError as exc:
                raise LocalStorageError(f"Failed to remove {path}: {exc}") from exc

    def keys(self) -> list[str]:
        if not self.root.is_dir():
            return []
        found: list[str] = []
        for path in sorted(self.root.glob("*.json")):
            try:
                envelope = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                continue
            if isinstance(envelope, dict) and isinstance(envelope.get("key"), str):
                found.append(envelope["key"])
        return found
