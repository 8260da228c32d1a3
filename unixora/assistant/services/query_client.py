"""Client for the Query Service (RAG question answering)."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from unixora.config import get_settings
from ..models.chat import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)


class QueryServiceError(Exception):
    """Raised when the Query Service cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class QueryServiceClient:
    """Service for sending questions to the Query Service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        top_k: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = get_settings()
        self.base_url = (base_url or self.settings.query_api_url).rstrip("/")
        self.top_k = top_k if top_k is not None else self.settings.query_top_k
        self.timeout = timeout if timeout is not None else self.settings.request_timeout
        self.transport = transport

    async def query(self, text: str) -> QueryResponse:
        """POST the question and parse the answer."""
        payload = QueryRequest(query=text, top_k=self.top_k).model_dump()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/query", json=payload)
                response.raise_for_status()
                return QueryResponse.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(f"Query Service returned error status: {e.response.status_code}")
            raise QueryServiceError(
                f"API error: {e.response.status_code}", status_code=e.response.status_code
            )
        except httpx.RequestError as e:
            logger.error(f"Query Service connection error: {e}")
            raise QueryServiceError(f"Query Service connection error: {e}")
        except (ValueError, ValidationError) as e:
            logger.error(f"Query Service returned a malformed body: {e}")
            raise QueryServiceError("Malformed response from Query Service")
