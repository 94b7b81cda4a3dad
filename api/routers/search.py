"""
Movie search against OMDb.

Results are transient: nothing is stored until a result is posted to `/movies`.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.deps import OmdbSession, OptionalOmdbApiKey, get_omdb_api_key, raise_user_facing_error
from movie_tracker.integrations.omdb.client import OmdbClientError, OmdbNotFoundError, search_movies

router = APIRouter(prefix="/search", tags=["search"])


class SearchResult(BaseModel):
    imdb_id: str
    title: str
    year: str
    type: str
    poster: str
    runtime: str | None = None
    director: str | None = None
    genre: str | None = None


@router.get("", response_model=list[SearchResult])
def search(
    api_key: OptionalOmdbApiKey,
    session: OmdbSession,
    q: str = Query(default="", max_length=200),
    details: bool = Query(default=True),
) -> list[dict]:
    """
    Search OMDb by title. Each hit carries runtime/director/genre unless `details=false`.
    """
    if not q.strip():
        return []
    api_key = api_key or get_omdb_api_key()
    try:
        results = search_movies(q, api_key=api_key, session=session, include_details=details)
    except OmdbNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except OmdbClientError as exc:
        raise_user_facing_error(exc, "Failed to fetch movies. Please try again.")
    return [
        {
            "imdb_id": r.imdb_id,
            "title": r.title,
            "year": r.year,
            "type": r.type,
            "poster": r.poster,
            "runtime": r.runtime,
            "director": r.director,
            "genre": r.genre,
        }
        for r in results
    ]
