from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_USERS = ("kenny", "nicole")
DEFAULT_TODO_STORAGE_DIR = ".data/todos"


def load_env(*, override: bool = False) -> Path | None:
    repo_root = Path(__file__).resolve().parents[2]
    candidates = [
        repo_root / ".env",
        Path.cwd() / ".env",
    ]
    for path in candidates:
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
            return path
    return None


def get_configured_users() -> tuple[str, ...]:
    """
    Users who share the collection, in display order.

    Set MOVIE_TRACKER_USERS as a comma-separated list; defaults to kenny,nicole.
    """
    raw = os.getenv("MOVIE_TRACKER_USERS", "")
    users: list[str] = []
    for part in raw.split(","):
        name = part.strip().casefold()
        if name and name not in users:
            users.append(name)
    return tuple(users) if users else DEFAULT_USERS


def get_todo_storage_dir() -> Path:
    raw = (os.getenv("TODO_STORAGE_DIR") or "").strip()
    return Path(raw or DEFAULT_TODO_STORAGE_DIR)
