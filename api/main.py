"""
Movie Tracker API - FastAPI application.

Provides endpoints for:
- Searching OMDb for movies
- The shared movie collection (add, delete, watched-by, to-watch, filter/sort/paginate)
- Per-user watched views
- Per-category to-do lists kept in local storage
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import movies, search, todos, watched

logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    Example: CORS_ALLOW_ORIGINS=http://localhost:3000,https://movies.example.com
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return []
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting up Movie Tracker API...")
    yield
    logger.info("Shutting down Movie Tracker API...")


app = FastAPI(
    title="Movie Tracker API",
    description="Shared movie list for two: OMDb search, watched-by tracking, and to-do lists",
    version="0.1.0",
    lifespan=lifespan,
)

# If no origins configured, allows all origins but disables credentials
cors_origins = get_cors_origins()
allow_credentials = len(cors_origins) > 0

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(search.router, prefix="/api/v1")
app.include_router(movies.router, prefix="/api/v1")
app.include_router(watched.router, prefix="/api/v1")
app.include_router(todos.router, prefix="/api/v1")


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "movie-tracker"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
