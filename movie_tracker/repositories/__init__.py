"""
Repository layer for DB access patterns.
"""

from movie_tracker.repositories.movies import (
    ITEMS_PER_PAGE,
    AddMovieResult,
    MovieListQuery,
    MovieNotFoundError,
    MovieRepositoryError,
    add_movie,
    delete_movie,
    find_movie_by_imdb_id,
    get_movie,
    list_movies,
    list_movies_watched_by,
    set_watched_by,
    toggle_to_watch,
    toggle_watched_by,
)

__all__ = [
    "ITEMS_PER_PAGE",
    "AddMovieResult",
    "MovieListQuery",
    "MovieNotFoundError",
    "MovieRepositoryError",
    "add_movie",
    "delete_movie",
    "find_movie_by_imdb_id",
    "get_movie",
    "list_movies",
    "list_movies_watched_by",
    "set_watched_by",
    "toggle_to_watch",
    "toggle_watched_by",
]
