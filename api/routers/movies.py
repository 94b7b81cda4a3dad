"""
Collection endpoints: list/filter/sort/paginate, add, delete, and watch-status toggles.

Toggles are read-modify-write against the `movies` table. Concurrent edits from the
two users are last-write-wins.
"""
from __future__ import annotations

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel

from api.deps import (
    KnownUsers,
    OmdbApiKey,
    OmdbSession,
    SupabaseClient,
    raise_user_facing_error,
    require_known_user,
)
from movie_tracker.integrations.omdb.client import (
    OmdbClientError,
    OmdbNotFoundError,
    OmdbSearchResult,
    fetch_search_result,
)
from movie_tracker.models.movies import movie_from_search_result
from movie_tracker.repositories import movies as repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["movies"])


# --- Pydantic models ---


class Movie(BaseModel):
    id: UUID
    imdb_id: str
    title: str
    year: int
    image_url: str
    watched_by: list[str] = []
    runtime: str | None = None
    director: str | None = None
    genre: str | None = None
    to_watch: bool
    created_at: str | None = None


class MoviePage(BaseModel):
    items: list[Movie]
    page: int
    page_size: int
    has_previous: bool
    has_next: bool


class SearchResultSelection(BaseModel):
    """A search hit picked by the user, as returned by `GET /search`."""

    imdb_id: str
    title: str
    year: str | int = ""
    type: str = "movie"
    poster: str = ""
    runtime: str | None = None
    director: str | None = None
    genre: str | None = None


class WatchedByUpdate(BaseModel):
    watched_by: list[str]


# --- Helpers ---


def _insert_selection(db, result: OmdbSearchResult, response: Response) -> dict:  # noqa: ANN001
    movie = movie_from_search_result(result)
    try:
        outcome = repo.add_movie(db, movie)
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to add movie")
    response.status_code = 201 if outcome.created else 200
    return outcome.row


# --- Endpoints ---


@router.get("", response_model=MoviePage)
def list_movies(
    db: SupabaseClient,
    search: str | None = Query(default=None, max_length=200),
    to_watch: bool | None = Query(default=None),
    watched_by: str | None = Query(default=None),
    sort_by: Literal["title", "year", "created_at"] = Query(default="created_at"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
) -> dict:
    """
    List the shared collection, 25 per page.

    A numeric `search` also matches the release year.
    """
    params = repo.MovieListQuery(
        search=search,
        to_watch=to_watch,
        watched_by=watched_by.strip().casefold() if watched_by else None,
        sort_by=sort_by,
        order=order,
        page=page,
    )
    try:
        items = repo.list_movies(db, params)
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to load movies")
    return {
        "items": items,
        "page": page,
        "page_size": params.page_size,
        "has_previous": page > 1,
        "has_next": len(items) >= params.page_size,
    }


@router.get("/to-watch", response_model=list[Movie])
def list_to_watch(db: SupabaseClient) -> list[dict]:
    """Movies flagged for future viewing, newest first."""
    try:
        return repo.list_movies(db, repo.MovieListQuery(to_watch=True, page_size=1000))
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to load movies")


@router.get("/{movie_id}", response_model=Movie)
def get_movie(db: SupabaseClient, movie_id: UUID) -> dict:
    try:
        row = repo.get_movie(db, str(movie_id))
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to load movie")
    if row is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return row


@router.post("", response_model=Movie, status_code=201)
def add_movie_from_search(db: SupabaseClient, payload: SearchResultSelection, response: Response) -> dict:
    """
    Add a selected search result to the collection.

    Adding an `imdb_id` that is already present is a no-op and returns the existing row (200).
    """
    if not payload.imdb_id.strip() or not payload.title.strip():
        raise HTTPException(status_code=422, detail="imdb_id and title are required")
    result = OmdbSearchResult(
        imdb_id=payload.imdb_id.strip(),
        title=payload.title.strip(),
        year=str(payload.year),
        type=payload.type,
        poster=payload.poster,
        runtime=payload.runtime,
        director=payload.director,
        genre=payload.genre,
    )
    return _insert_selection(db, result, response)


@router.post("/imdb/{imdb_id}", response_model=Movie, status_code=201)
def add_movie_by_imdb_id(
    db: SupabaseClient,
    api_key: OmdbApiKey,
    session: OmdbSession,
    imdb_id: str,
    response: Response,
) -> dict:
    """Look the title up on OMDb and add it, idempotently by `imdb_id`."""
    try:
        existing = repo.find_movie_by_imdb_id(db, imdb_id)
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to add movie")
    if existing is not None:
        response.status_code = 200
        return existing

    try:
        result = fetch_search_result(imdb_id, api_key=api_key, session=session)
    except OmdbNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except OmdbClientError as exc:
        raise_user_facing_error(exc, "Failed to fetch movies. Please try again.")
    return _insert_selection(db, result, response)


@router.delete("/{movie_id}", status_code=204)
def delete_movie(db: SupabaseClient, movie_id: UUID) -> Response:
    try:
        deleted = repo.delete_movie(db, str(movie_id))
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to delete movie")
    if not deleted:
        raise HTTPException(status_code=404, detail="Movie not found")
    return Response(status_code=204)


@router.put("/{movie_id}/watched-by", response_model=Movie)
def set_watched_by(
    db: SupabaseClient,
    known_users: KnownUsers,
    movie_id: UUID,
    payload: WatchedByUpdate,
) -> dict:
    """Replace who has watched the movie (one user, everyone, or nobody)."""
    try:
        return repo.set_watched_by(db, str(movie_id), payload.watched_by, known_users=known_users)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except repo.MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Movie not found") from exc
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to update watch status")


@router.post("/{movie_id}/watched-by/{user}/toggle", response_model=Movie)
def toggle_watched_by(
    db: SupabaseClient,
    known_users: KnownUsers,
    movie_id: UUID,
    user: str,
) -> dict:
    name = require_known_user(user, known_users)
    try:
        return repo.toggle_watched_by(db, str(movie_id), name, known_users=known_users)
    except repo.MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Movie not found") from exc
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to update watch status")


@router.post("/{movie_id}/to-watch/toggle", response_model=Movie)
def toggle_to_watch(db: SupabaseClient, movie_id: UUID) -> dict:
    try:
        return repo.toggle_to_watch(db, str(movie_id))
    except repo.MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Movie not found") from exc
    except repo.MovieRepositoryError as exc:
        raise_user_facing_error(exc, "Failed to update to-watch status")
