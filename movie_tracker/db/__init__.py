"""
Database helpers for movie tracker scripts/services.
"""

from movie_tracker.db.supabase import create_supabase_admin_client

__all__ = [
    "create_supabase_admin_client",
]
