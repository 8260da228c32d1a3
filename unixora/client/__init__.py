"""Client-side session context and auth client."""

from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from .session_context import NotAuthenticatedError, SessionContext

__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "NotAuthenticatedError",
    "SessionContext",
]
