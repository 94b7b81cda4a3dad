"""
Per-category to-do lists kept in local storage under `todos-{category}`.

Every mutation rewrites the whole list; there is no server copy.
"""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import replace

from movie_tracker.models.todos import TodoItem
from movie_tracker.storage.local import LocalStorage

STORAGE_KEY_PREFIX = "todos-"
_CATEGORY_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

logger = logging.getLogger(__name__)


class TodoItemNotFoundError(KeyError):
    pass


def validate_category(category: str) -> str:
    category = (category or "").strip()
    if not _CATEGORY_RE.match(category):
        raise ValueError(f"Invalid todo category: {category!r}")
    return category


def storage_key(category: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{validate_category(category)}"


def list_categories(storage: LocalStorage) -> list[str]:
    return [key[len(STORAGE_KEY_PREFIX):] for key in storage.keys() if key.startswith(STORAGE_KEY_PREFIX)]


class TodoList:
    def __init__(self, category: str, storage: LocalStorage) -> None:
        self.category = validate_category(category)
        self._storage = storage
        self._items = self._load()

    @property
    def key(self) -> str:
        return storage_key(self.category)

    @property
    def items(self) -> list[TodoItem]:
        return list(self._items)

    def _load(self) -> list[TodoItem]:
        raw = self._storage.get_item(self.key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable todo list %s", self.key)
            return []
        if not isinstance(data, list):
            return []
        items = [TodoItem.from_dict(entry) for entry in data if isinstance(entry, dict)]
        return [item for item in items if item is not None]

    def _commit(self, items: list[TodoItem]) -> None:
        # Storage first; the in-memory list only changes once the write succeeded.
        self._storage.set_item(self.key, json.dumps([item.to_dict() for item in items]))
        self._items = items

    def _next_id(self) -> str:
        candidate = int(time.time() * 1000)
        taken = {item.id for item in self._items}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _find(self, item_id: str) -> TodoItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise TodoItemNotFoundError(item_id)

    def add(self, text: str) -> TodoItem | None:
        if not (text or "").strip():
            return None
        item = TodoItem(id=self._next_id(), text=text)
        self._commit([*self._items, item])
        return item

    def toggle(self, item_id: str) -> TodoItem:
        item = self._find(item_id)
        flipped = replace(item, completed=not item.completed)
        self._commit([flipped if i is item else i for i in self._items])
        return flipped

    def delete(self, item_id: str) -> None:
        item = self._find(item_id)
        self._commit([i for i in self._items if i is not item])
