from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class TodoItem:
    id: str
    text: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TodoItem | None:
        item_id = data.get("id")
        text = data.get("text")
        if item_id is None or not isinstance(text, str):
            return None
        return cls(id=str(item_id), text=text, completed=bool(data.get("completed")))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
