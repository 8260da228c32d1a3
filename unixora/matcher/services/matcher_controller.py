"""Matcher page state: loading flag, error banner, and results."""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from unixora.client.session_context import SessionContext
from ..models.match import MatchForm, MatchResults
from .match_client import MatchServiceClient, MatchServiceError
from .request_builder import build_match_payload, unpack_match_response

logger = logging.getLogger(__name__)

MATCH_ERROR = "Failed to find matches. Please check if the API server is running."
FORM_ERROR = "Some preferences are not valid. Please review the form and try again."


class MatcherController:
    """Submits the preference form and holds the latest results."""

    def __init__(self, match_client: MatchServiceClient, context: SessionContext):
        self.match_client = match_client
        self.profile = context.require_profile()
        self.loading = False
        self.error: Optional[str] = None
        self.results: Optional[MatchResults] = None

    async def submit(self, form: Union[MatchForm, Mapping[str, Any]]) -> Optional[MatchResults]:
        """Run one match request; failures end up in ``error``."""
        self.loading = True
        self.error = None
        self.results = None
        try:
            payload = build_match_payload(form)
        except ValidationError as e:
            logger.warning(f"Rejected match form: {e}")
            self.error = FORM_ERROR
            self.loading = False
            return None

        try:
            data = await self.match_client.match(payload)
            self.results = unpack_match_response(data)
        except MatchServiceError as e:
            logger.error(f"Match request failed: {e}")
            self.error = MATCH_ERROR
        finally:
            self.loading = False
        return self.results
