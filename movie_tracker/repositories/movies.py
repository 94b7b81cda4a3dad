from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from supabase import Client

from movie_tracker.db.supabase import MOVIES_TABLE
from movie_tracker.models.movies import MovieRecord, normalize_watched_by

ITEMS_PER_PAGE = 25
SORT_FIELDS = ("title", "year", "created_at")

SortField = Literal["title", "year", "created_at"]
SortOrder = Literal["asc", "desc"]

logger = logging.getLogger(__name__)


class MovieRepositoryError(RuntimeError):
    pass


class MovieNotFoundError(MovieRepositoryError):
    pass


@dataclass(frozen=True)
class MovieListQuery:
    search: str | None = None
    to_watch: bool | None = None
    watched_by: str | None = None
    sort_by: SortField = "created_at"
    order: SortOrder = "desc"
    page: int = 1
    page_size: int = ITEMS_PER_PAGE

    @property
    def range_start(self) -> int:
        return (max(self.page, 1) - 1) * self.page_size

    @property
    def range_end(self) -> int:
        return self.range_start + self.page_size - 1


@dataclass(frozen=True)
class AddMovieResult:
    row: dict[str, Any]
    created: bool


def assert_movies_table_exists(db: Client) -> None:
    """
    Fail fast with a clear error if the `movies` table is missing in Supabase.
    """

    def is_missing_relation(message: str) -> bool:
        msg = (message or "").casefold()
        return (
            "42p01" in msg  # undefined_table
            or "pgrst205" in msg  # postgrest: relation not found in schema cache
            or ("relation" in msg and "does not exist" in msg)
            or ("schema cache" in msg and "movies" in msg)
        )

    def help_message() -> str:
        return (
            "Database table `movies` is missing. "
            "Run `supabase db push` to apply migrations (see `supabase/migrations/0001_movies.sql`)."
        )

    try:
        response = db.table(MOVIES_TABLE).select("id").limit(1).execute()
    except Exception as exc:
        if is_missing_relation(str(exc)):
            raise MovieRepositoryError(help_message()) from exc
        raise MovieRepositoryError(f"Supabase error during movies preflight: {exc}") from exc

    error = getattr(response, "error", None)
    if not error:
        return

    combined = _describe_error(error)
    if is_missing_relation(combined):
        raise MovieRepositoryError(help_message())
    raise MovieRepositoryError(f"Supabase error during movies preflight: {combined}")


def _describe_error(error: Any) -> str:
    parts = [
        str(getattr(error, "code", "") or ""),
        str(getattr(error, "message", "") or ""),
        str(getattr(error, "details", "") or ""),
        str(error),
    ]
    return " ".join([p for p in parts if p]).strip()


def is_unique_violation(error: Any) -> bool:
    code = str(getattr(error, "code", "") or "")
    return code == "23505" or "duplicate key" in str(error).casefold()


def _execute(query: Any, context: str) -> Any:
    try:
        response = query.execute()
    except Exception as exc:
        raise MovieRepositoryError(f"Supabase error during {context}: {exc}") from exc
    if hasattr(response, "error") and response.error:
        raise MovieRepositoryError(f"Supabase error during {context}: {response.error}")
    return response


def _rows(response: Any) -> list[dict[str, Any]]:
    data = response.data or []
    return data if isinstance(data, list) else []


def apply_search_filter(query: Any, search: str | None) -> Any:
    """
    Filter by title substring; an all-digit search term also matches the release year exactly.
    """
    text = (search or "").strip()
    if not text:
        return query
    if text.isascii() and text.isdigit():
        return query.or_(f"title.ilike.%{text}%,year.eq.{int(text)}")
    return query.ilike("title", f"%{text}%")


def list_movies(db: Client, params: MovieListQuery | None = None) -> list[dict[str, Any]]:
    params = params or MovieListQuery()
    if params.sort_by not in SORT_FIELDS:
        raise ValueError(f"Unsupported sort field: {params.sort_by!r}")

    query = db.table(MOVIES_TABLE).select("*")
    query = apply_search_filter(query, params.search)
    if params.to_watch is not None:
        query = query.eq("to_watch", params.to_watch)
    if params.watched_by:
        query = query.contains("watched_by", [params.watched_by])

    query = query.order(params.sort_by, desc=params.order == "desc").range(params.range_start, params.range_end)
    return _rows(_execute(query, "listing movies"))


def list_movies_watched_by(db: Client, user: str) -> list[dict[str, Any]]:
    query = (
        db.table(MOVIES_TABLE)
        .select("*")
        .contains("watched_by", [user])
        .order("created_at", desc=True)
    )
    return _rows(_execute(query, f"listing movies watched by {user}"))


def get_movie(db: Client, movie_id: str) -> dict[str, Any] | None:
    query = db.table(MOVIES_TABLE).select("*").eq("id", str(movie_id)).limit(1)
    data = _rows(_execute(query, "fetching movie"))
    return data[0] if data else None


def find_movie_by_imdb_id(db: Client, imdb_id: str) -> dict[str, Any] | None:
    query = db.table(MOVIES_TABLE).select("*").eq("imdb_id", imdb_id).limit(1)
    data = _rows(_execute(query, "finding movie by imdb id"))
    return data[0] if data else None


def add_movie(db: Client, movie: MovieRecord) -> AddMovieResult:
    """
    Insert `movie` unless a row with the same `imdb_id` already exists.

    A duplicate add is a no-op: the existing row is returned with `created=False`.
    """

    existing = find_movie_by_imdb_id(db, movie.imdb_id)
    if existing is not None:
        logger.info("Movie %s already in collection; skipping insert", movie.imdb_id)
        return AddMovieResult(row=existing, created=False)

    payload = movie.to_row()
    try:
        response = db.table(MOVIES_TABLE).insert(payload).execute()
    except Exception as exc:
        if not is_unique_violation(exc):
            raise MovieRepositoryError(f"Supabase error during inserting movie: {exc}") from exc
        response = None

    error = getattr(response, "error", None) if response is not None else None
    if response is None or (error and is_unique_violation(error)):
        # Lost a race with the other user adding the same title.
        existing = find_movie_by_imdb_id(db, movie.imdb_id)
        if existing is None:
            raise MovieRepositoryError(f"Movie {movie.imdb_id} reported as duplicate but could not be read back.")
        return AddMovieResult(row=existing, created=False)
    if error:
        raise MovieRepositoryError(f"Supabase error during inserting movie: {error}")

    data = _rows(response)
    return AddMovieResult(row=data[0] if data else payload, created=True)


def delete_movie(db: Client, movie_id: str) -> bool:
    query = db.table(MOVIES_TABLE).delete().eq("id", str(movie_id))
    return bool(_rows(_execute(query, "deleting movie")))


def _update_movie(db: Client, movie_id: str, patch: dict[str, Any], context: str) -> dict[str, Any]:
    query = db.table(MOVIES_TABLE).update(patch).eq("id", str(movie_id))
    data = _rows(_execute(query, context))
    if not data:
        raise MovieNotFoundError(f"Movie {movie_id} not found.")
    return data[0]


def _require_movie(db: Client, movie_id: str) -> MovieRecord:
    row = get_movie(db, movie_id)
    if row is None:
        raise MovieNotFoundError(f"Movie {movie_id} not found.")
    return MovieRecord.from_row(row)


def set_watched_by(
    db: Client,
    movie_id: str,
    users: Iterable[str],
    *,
    known_users: Iterable[str],
) -> dict[str, Any]:
    watched_by = normalize_watched_by(users, known_users=known_users)
    return _update_movie(db, movie_id, {"watched_by": watched_by}, "updating watch status")


def toggle_watched_by(
    db: Client,
    movie_id: str,
    user: str,
    *,
    known_users: Iterable[str],
) -> dict[str, Any]:
    """Flip `user` in or out of the movie's watched-by set (read-modify-write, last write wins)."""
    known = [u.casefold() for u in known_users]
    movie = _require_movie(db, movie_id)
    current = {u.casefold() for u in movie.watched_by if u.casefold() in known}
    target = user.casefold()
    if target in current:
        current.discard(target)
    else:
        current.add(target)
    return set_watched_by(db, movie_id, current, known_users=known)


def toggle_to_watch(db: Client, movie_id: str) -> dict[str, Any]:
    movie = _require_movie(db, movie_id)
    return _update_movie(db, movie_id, {"to_watch": not movie.to_watch}, "updating to-watch status")
