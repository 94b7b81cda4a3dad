"""
OMDb integration client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from movie_tracker.integrations.omdb.client import (
        OmdbClientError,
        OmdbNotFoundError,
        OmdbSearchResult,
        fetch_movie_details,
        search_movies,
    )

__all__ = [
    "OmdbClientError",
    "OmdbNotFoundError",
    "OmdbSearchResult",
    "fetch_movie_details",
    "search_movies",
]


def __getattr__(name: str):
    if name in __all__:
        from movie_tracker.integrations.omdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
