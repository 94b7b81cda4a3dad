"""
Dependency injection for the Supabase client and other shared resources.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from functools import lru_cache
from typing import Annotated, NoReturn

import requests
from dotenv import load_dotenv
from fastapi import Depends, HTTPException
from supabase import Client, create_client

from movie_tracker.storage.local import LocalStorage
from movie_tracker.utils.env import get_configured_users, get_todo_storage_dir

# Load environment variables if running standalone
load_dotenv()

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase_url() -> str:
    url = os.getenv("SUPABASE_URL")
    if not url:
        raise RuntimeError("SUPABASE_URL environment variable is not set")
    return url


@lru_cache
def get_supabase_anon_key() -> str:
    key = os.getenv("SUPABASE_ANON_KEY")
    if not key:
        raise RuntimeError("SUPABASE_ANON_KEY environment variable is not set")
    return key


@lru_cache
def get_omdb_api_key() -> str:
    key = os.getenv("OMDB_API_KEY")
    if not key:
        raise RuntimeError("OMDB_API_KEY environment variable is not set")
    return key


def get_supabase_client() -> Client:
    """
    Returns a Supabase client using the anon key.

    Both users share the one collection, so reads and writes go through the same client.
    """
    return create_client(get_supabase_url(), get_supabase_anon_key())


def get_optional_omdb_api_key() -> str | None:
    """OMDb key if configured; routes that can answer without OMDb resolve the key lazily."""
    return (os.getenv("OMDB_API_KEY") or "").strip() or None


def get_omdb_session() -> Iterator[requests.Session]:
    with requests.Session() as session:
        yield session


def get_known_users() -> tuple[str, ...]:
    return get_configured_users()


@lru_cache
def get_local_storage() -> LocalStorage:
    return LocalStorage(get_todo_storage_dir())


# Type aliases for dependency injection
SupabaseClient = Annotated[Client, Depends(get_supabase_client)]
OmdbApiKey = Annotated[str, Depends(get_omdb_api_key)]
OptionalOmdbApiKey = Annotated[str | None, Depends(get_optional_omdb_api_key)]
OmdbSession = Annotated[requests.Session, Depends(get_omdb_session)]
KnownUsers = Annotated[tuple[str, ...], Depends(get_known_users)]
TodoStorage = Annotated[LocalStorage, Depends(get_local_storage)]


def raise_user_facing_error(exc: Exception, message: str, *, status_code: int = 502) -> NoReturn:
    """
    Log the underlying failure and raise an HTTP error carrying only `message`.

    Internal error details are not leaked to the client; nothing is retried.
    """
    logger.error(f"{message}: {exc}")
    raise HTTPException(status_code=status_code, detail=message) from exc


def require_known_user(user: str, known_users: tuple[str, ...]) -> str:
    name = (user or "").strip().casefold()
    if name not in known_users:
        raise HTTPException(status_code=404, detail=f"Unknown user: {user}")
    return name
