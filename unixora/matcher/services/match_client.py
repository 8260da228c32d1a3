"""Client for the Match Service (ranked university matching)."""

import logging
from typing import Any, Dict, Optional

import httpx

from unixora.config import get_settings

logger = logging.getLogger(__name__)


class MatchServiceError(Exception):
    """Raised when the Match Service cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MatchServiceClient:
    """Service for posting match requests."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = get_settings()
        self.base_url = (base_url or self.settings.match_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else self.settings.request_timeout
        self.transport = transport

    async def match(self, payload: Dict[str, Any]) -> Any:
        """POST a built payload and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/match", json=payload)
                response.raise_for_status()
                data = response.json()
                logger.info(f"Match Service returned {len(data.get('matches') or []) if isinstance(data, dict) else 0} matches")
                return data

        except httpx.HTTPStatusError as e:
            logger.error(f"Match Service returned error status: {e.response.status_code}")
            raise MatchServiceError(f"API error: {e.response.status_code}", status_code=e.response.status_code)
        except httpx.RequestError as e:
            logger.error(f"Match Service connection error: {e}")
            raise MatchServiceError(f"Match Service connection error: {e}")
        except ValueError as e:
            logger.error(f"Match Service returned a malformed body: {e}")
            raise MatchServiceError("Malformed response from Match Service")
