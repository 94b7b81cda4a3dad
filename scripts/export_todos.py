#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys

from movie_tracker.storage.local import LocalStorage
from movie_tracker.todos import TodoList, list_categories
from movie_tracker.utils.env import get_todo_storage_dir, load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="export_todos",
        description="Print to-do lists from local storage as JSON.",
    )
    parser.add_argument("--category", action="append", default=[], help="Category to export. Repeatable.")
    parser.add_argument("--storage-dir", default=None, help="Override TODO_STORAGE_DIR.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv or sys.argv[1:])
    load_env()

    storage = LocalStorage(args.storage_dir or get_todo_storage_dir())
    categories = args.category or list_categories(storage)
    export = {
        category: [item.to_dict() for item in TodoList(category, storage).items]
        for category in categories
    }
    print(json.dumps(export, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
