"""
Domain models shared across scripts and services.
"""

from movie_tracker.models.movies import MovieRecord, movie_from_search_result, parse_release_year
from movie_tracker.models.todos import TodoItem

__all__ = [
    "MovieRecord",
    "TodoItem",
    "movie_from_search_result",
    "parse_release_year",
]
