"""Client for the auth API: signup, login, verify, logout."""

import logging
from typing import Any, Dict, Optional

import httpx

from unixora.config import get_settings
from .session_context import SessionContext

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Raised when an auth request fails; ``detail`` is the server's message."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"


class AuthClient:
    """Talks to the auth API and keeps the session context in sync."""

    def __init__(
        self,
        context: SessionContext,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = get_settings()
        self.context = context
        self.base_url = (base_url or self.settings.auth_api_url).rstrip("/")
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout, transport=self.transport) as client:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Auth service connection error: {e}")
            raise AuthServiceError("Could not reach the server. Please try again.")

        if response.is_error:
            raise AuthServiceError(_error_detail(response), status_code=response.status_code)
        return response.json()

    async def signup(self, first_name: str, last_name: str, email: str, password: str) -> Dict[str, Any]:
        """Create an account. The caller is sent to login afterwards."""
        return await self._request(
            "POST",
            "/api/auth/signup",
            json={"firstName": first_name, "lastName": last_name, "email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and store the token and profile."""
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.context.save(data["token"], data["user"])
        return data["user"]

    async def verify(self) -> Dict[str, Any]:
        """Check the stored token with the server; an invalid token logs out."""
        token = self.context.token
        if not token:
            raise AuthServiceError("No token provided.", status_code=401)
        try:
            data = await self._request("GET", "/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        except AuthServiceError as e:
            if e.status_code == 401:
                self.context.clear()
            raise
        return data["user"]

    def logout(self) -> None:
        self.context.clear()
