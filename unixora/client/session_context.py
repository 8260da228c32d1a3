"""Session context: the stored token and user profile."""

import json
from typing import Any, Dict, Optional

from .storage import KeyValueStorage

TOKEN_KEY = "token"
USER_KEY = "user"


class NotAuthenticatedError(Exception):
    """Raised when a gated page is opened without a stored profile."""


class SessionContext:
    """Read/write access to the auth token and profile in client storage."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def save(self, token: str, user: Dict[str, Any]) -> None:
        self.storage.set(TOKEN_KEY, token)
        self.storage.set(USER_KEY, json.dumps(user))

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return user if isinstance(user, dict) else None

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    def require_profile(self) -> Dict[str, Any]:
        """Return the profile or raise, the equivalent of redirecting to login."""
        profile = self.profile
        if profile is None:
            raise NotAuthenticatedError("Please log in first.")
        return profile

    def clear(self) -> None:
        """Forget the token and profile (logout)."""
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(USER_KEY)
