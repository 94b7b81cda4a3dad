#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from movie_tracker.db.supabase import create_supabase_admin_client
from movie_tracker.integrations.omdb.client import (
    OmdbClientError,
    OmdbSearchResult,
    fetch_search_result,
    search_movies,
)
from movie_tracker.models.movies import movie_from_search_result
from movie_tracker.repositories.movies import MovieRepositoryError, add_movie, assert_movies_table_exists
from movie_tracker.utils.env import load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="add_movie",
        description="Search OMDb and add a movie to the shared collection.",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--imdb-id", help="IMDb id (tt...) to add directly.")
    target.add_argument("--query", help="Title search; the first hit is added unless --list is set.")
    parser.add_argument("--list", action="store_true", help="Only print search hits, do not add anything.")
    parser.add_argument("--dry-run", action="store_true", help="Run without writing to Supabase.")
    return parser.parse_args(argv)


def _describe(result: OmdbSearchResult) -> str:
    extras = ", ".join(part for part in (result.runtime, result.director, result.genre) if part)
    suffix = f" [{extras}]" if extras else ""
    return f"{result.imdb_id} {result.title} ({result.year}){suffix}"


def _resolve_result(args: argparse.Namespace) -> OmdbSearchResult | None:
    if args.imdb_id:
        return fetch_search_result(args.imdb_id)

    results = search_movies(args.query)
    if args.list:
        for result in results:
            print(_describe(result))
        return None
    return results[0] if results else None


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv or sys.argv[1:])
    load_env()

    try:
        result = _resolve_result(args)
    except OmdbClientError as exc:
        print(f"OMDb lookup failed: {exc}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError) as exc:
        # Missing OMDB_API_KEY or an empty --imdb-id.
        print(f"Cannot look up movie: {exc}", file=sys.stderr)
        return 1
    if result is None:
        return 0

    movie = movie_from_search_result(result)
    if args.dry_run:
        print(f"DRY RUN would add {_describe(result)}")
        return 0

    try:
        db = create_supabase_admin_client()
        assert_movies_table_exists(db)
        outcome = add_movie(db, movie)
    except MovieRepositoryError as exc:
        print(f"Failed to add movie: {exc}", file=sys.stderr)
        return 1
    except RuntimeError as exc:
        # Missing SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY.
        print(f"Supabase is not configured: {exc}", file=sys.stderr)
        return 1
    verb = "ADDED" if outcome.created else "EXISTS"
    print(f"{verb} movie id={outcome.row.get('id')} imdb_id={result.imdb_id} title={result.title!r}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
