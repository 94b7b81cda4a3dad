"""
Per-user watched views.
"""
from __future__ import annotations

from fastapi import APIRouter

from api.deps import KnownUsers, SupabaseClient, raise_user_facing_error, require_known_user
from api.routers.movies import Movie
from movie_tracker.repositories import movies as repo

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[str])
def list_users(known_users: KnownUsers) -> list[str]:
    """Users sharing the collection."""
    return list(known_users)


@router.get("/{user}/watched", response_model=list[Movie])
def list_watched(db: SupabaseClient, known_users: KnownUsers, user: str) -> list[dict]:
    """Movies `user` has watched, newest first."""
    name = require_known_user(user, known_users)
    try:
        return repo.list_movies_watched_by(db, name)
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to load movies")
