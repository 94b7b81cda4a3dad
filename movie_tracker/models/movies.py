from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from movie_tracker.integrations.omdb.client import OmdbSearchResult

_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


def parse_release_year(value: Any) -> int:
    """
    Parse the leading year out of an OMDb `Year` value.

    Series come back as ranges ("2008–2013", "2019–"); only the first year is kept.
    Anything unparseable maps to 0.
    """
    if isinstance(value, int):
        return value
    match = _LEADING_DIGITS_RE.match(str(value or ""))
    return int(match.group(1)) if match else 0


def normalize_poster_url(value: Any) -> str:
    url = str(value or "").strip()
    return "" if url == "N/A" else url


def normalize_watched_by(users: Iterable[str], *, known_users: Iterable[str]) -> list[str]:
    """Dedupe `users` and order them like `known_users`. Raises ValueError on unknown names."""
    known = [u.casefold() for u in known_users]
    wanted = {str(u).strip().casefold() for u in users if str(u).strip()}
    unknown = sorted(wanted - set(known))
    if unknown:
        raise ValueError(f"Unknown user(s): {', '.join(unknown)}")
    return [u for u in known if u in wanted]


@dataclass(frozen=True)
class MovieRecord:
    """
    Canonical movie row (maps to the `movies` table).

    `created_at` is assigned by the database and is absent on rows built locally.
    """

    id: str
    imdb_id: str
    title: str
    year: int = 0
    image_url: str = ""
    watched_by: list[str] = field(default_factory=list)
    runtime: str | None = None
    director: str | None = None
    genre: str | None = None
    to_watch: bool = False
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> MovieRecord:
        watched = row.get("watched_by")
        return cls(
            id=str(row.get("id") or ""),
            imdb_id=str(row.get("imdb_id") or ""),
            title=str(row.get("title") or ""),
            year=parse_release_year(row.get("year")),
            image_url=str(row.get("image_url") or ""),
            watched_by=[str(u) for u in watched] if isinstance(watched, list) else [],
            runtime=row.get("runtime") if isinstance(row.get("runtime"), str) else None,
            director=row.get("director") if isinstance(row.get("director"), str) else None,
            genre=row.get("genre") if isinstance(row.get("genre"), str) else None,
            to_watch=bool(row.get("to_watch")),
            created_at=row.get("created_at") if isinstance(row.get("created_at"), str) else None,
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": self.id,
            "imdb_id": self.imdb_id,
            "title": self.title,
            "year": self.year,
            "image_url": self.image_url,
            "watched_by": list(self.watched_by),
            "runtime": self.runtime,
            "director": self.director,
            "genre": self.genre,
            "to_watch": self.to_watch,
        }
        if self.created_at:
            row["created_at"] = self.created_at
        return row

    def is_watched_by(self, user: str) -> bool:
        return user.casefold() in {u.casefold() for u in self.watched_by}


def movie_from_search_result(result: OmdbSearchResult, *, movie_id: str | None = None) -> MovieRecord:
    """
    Map an OMDb search hit to a new collection row.

    New rows start on the to-watch list with nobody marked as having watched them.
    """
    return MovieRecord(
        id=movie_id or str(uuid4()),
        imdb_id=result.imdb_id,
        title=result.title,
        year=parse_release_year(result.year),
        image_url=normalize_poster_url(result.poster),
        watched_by=[],
        runtime=result.runtime,
        director=result.director,
        genre=result.genre,
        to_watch=True,
    )
