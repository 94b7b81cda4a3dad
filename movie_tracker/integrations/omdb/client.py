from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

import requests

OMDB_API_BASE_URL = "https://www.omdbapi.com/"
DEFAULT_NOT_FOUND_MESSAGE = "No movies found. Try another search term."

logger = logging.getLogger(__name__)


class OmdbClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


class OmdbNotFoundError(OmdbClientError):
    """OMDb answered `Response: "False"` (no matches, unknown id, etc.)."""


@dataclass(frozen=True)
class OmdbSearchResult:
    imdb_id: str
    title: str
    year: str
    type: str = "movie"
    poster: str = ""
    runtime: str | None = None
    director: str | None = None
    genre: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> OmdbSearchResult:
        return cls(
            imdb_id=str(payload.get("imdbID") or "").strip(),
            title=str(payload.get("Title") or "").strip(),
            year=str(payload.get("Year") or "").strip(),
            type=str(payload.get("Type") or "movie").strip(),
            poster=str(payload.get("Poster") or "").strip(),
            runtime=_optional_text(payload.get("Runtime")),
            director=_optional_text(payload.get("Director")),
            genre=_optional_text(payload.get("Genre")),
        )

    def with_details(self, details: Mapping[str, Any]) -> OmdbSearchResult:
        return replace(
            self,
            runtime=_optional_text(details.get("Runtime")) or self.runtime,
            director=_optional_text(details.get("Director")) or self.director,
            genre=_optional_text(details.get("Genre")) or self.genre,
        )


def _optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or os.getenv("OMDB_API_KEY") or "").strip()
    if not resolved:
        raise RuntimeError("OMDB_API_KEY is not set.")
    return resolved


def _request_json(
    session: requests.Session,
    params: Mapping[str, Any],
    *,
    timeout_seconds: float = 10.0,
) -> dict[str, Any]:
    # Single attempt: callers surface the failure instead of retrying.
    try:
        resp = session.get(
            OMDB_API_BASE_URL,
            params=params,
            headers={"accept": "application/json"},
            timeout=timeout_seconds,
        )
    except requests.RequestException as exc:
        raise OmdbClientError(f"OMDb request failed: {exc}") from exc

    try:
        payload = resp.json()
    except ValueError as exc:
        raise OmdbClientError(
            "OMDb returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise OmdbClientError("OMDb returned unexpected JSON shape (not an object).", status_code=resp.status_code)

    if payload.get("Response") == "False":
        message = str(payload.get("Error") or "").strip() or DEFAULT_NOT_FOUND_MESSAGE
        # OMDb reports a bad key as 401 with the same envelope; that is a client problem, not a miss.
        if resp.status_code != 200:
            raise OmdbClientError(message, status_code=resp.status_code, body_snippet=(resp.text or "")[:400])
        raise OmdbNotFoundError(message, status_code=resp.status_code)

    if resp.status_code != 200:
        raise OmdbClientError(
            f"OMDb request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )
    return payload


def fetch_movie_details(
    imdb_id: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """
    Fetch the full OMDb record for an IMDb id (`?i=tt...`).

    Raises OmdbNotFoundError when OMDb does not know the id.
    """

    imdb_id = (imdb_id or "").strip()
    if not imdb_id:
        raise ValueError("IMDb id is empty.")
    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    return _request_json(session, {"i": imdb_id, "apikey": api_key})


def fetch_search_result(
    imdb_id: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> OmdbSearchResult:
    """Look up a single title and shape it like a search hit (details included)."""
    details = fetch_movie_details(imdb_id, api_key=api_key, session=session)
    return OmdbSearchResult.from_payload(details)


def search_movies(
    query: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    include_details: bool = True,
) -> list[OmdbSearchResult]:
    """
    Search OMDb by title (`?s=...`).

    With `include_details=True` every hit is enriched with runtime/director/genre via a
    per-result details lookup. A failed lookup leaves that hit as-is.

    Returns an empty list for a blank query without calling OMDb.
    Raises OmdbNotFoundError with OMDb's own message when nothing matches.
    """

    query = (query or "").strip()
    if not query:
        return []

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    payload = _request_json(session, {"s": query, "apikey": api_key})

    hits = payload.get("Search")
    results = [
        OmdbSearchResult.from_payload(hit)
        for hit in (hits if isinstance(hits, list) else [])
        if isinstance(hit, Mapping)
    ]
    results = [r for r in results if r.imdb_id]
    if not include_details:
        return results

    detailed: list[OmdbSearchResult] = []
    for result in results:
        try:
            details = _request_json(session, {"i": result.imdb_id, "apikey": api_key})
        except OmdbClientError as exc:
            logger.warning("OMDb details lookup failed for %s: %s", result.imdb_id, exc)
            detailed.append(result)
            continue
        detailed.append(result.with_details(details))
    return detailed
