"""
Local persistent key-value storage (server-side stand-in for browser localStorage).
"""

from movie_tracker.storage.local import LocalStorage, LocalStorageError

__all__ = [
    "LocalStorage",
    "LocalStorageError",
]
