"""
To-do list endpoints, one list per category, persisted in local storage only.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel

from api.deps import TodoStorage, raise_user_facing_error
from movie_tracker.storage.local import LocalStorageError
from movie_tracker.todos import TodoItemNotFoundError, TodoList, list_categories

router = APIRouter(prefix="/todos", tags=["todos"])


class TodoItem(BaseModel):
    id: str
    text: str
    completed: bool


class TodoCreate(BaseModel):
    text: str


def _open_list(category: str, storage) -> TodoList:  # noqa: ANN001
    try:
        return TodoList(category, storage)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except LocalStorageError as exc:
        raise_user_facing_error(exc, "Failed to load todo list", status_code=500)


@router.get("", response_model=list[str])
def get_categories(storage: TodoStorage) -> list[str]:
    return list_categories(storage)


@router.get("/{category}", response_model=list[TodoItem])
def get_todos(storage: TodoStorage, category: str) -> list[dict]:
    todos = _open_list(category, storage)
    return [item.to_dict() for item in todos.items]


@router.post("/{category}", response_model=TodoItem, status_code=201)
def add_todo(storage: TodoStorage, category: str, payload: TodoCreate) -> dict:
    todos = _open_list(category, storage)
    try:
        item = todos.add(payload.text)
    except LocalStorageError as exc:
        raise_user_facing_error(exc, "Failed to save todo list", status_code=500)
    if item is None:
        raise HTTPException(status_code=422, detail="Todo text must not be empty")
    return item.to_dict()


@router.post("/{category}/{item_id}/toggle", response_model=TodoItem)
def toggle_todo(storage: TodoStorage, category: str, item_id: str) -> dict:
    todos = _open_list(category, storage)
    try:
        return todos.toggle(item_id).to_dict()
    except TodoItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Todo item not found") from exc
    except LocalStorageError as exc:
        raise_user_facing_error(exc, "Failed to save todo list", status_code=500)


@router.delete("/{category}/{item_id}", status_code=204)
def delete_todo(storage: TodoStorage, category: str, item_id: str) -> Response:
    todos = _open_list(category, storage)
    try:
        todos.delete(item_id)
    except TodoItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Todo item not found") from exc
    except LocalStorageError as exc:
        raise_user_facing_error(exc, "Failed to save todo list", status_code=500)
    return Response(status_code=204)
