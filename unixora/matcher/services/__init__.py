"""Matcher services."""

from .match_client import MatchServiceClient, MatchServiceError
from .matcher_controller import MatcherController
from .request_builder import build_match_payload, card_sections, card_subtitle, unpack_match_response

__all__ = [
    "MatchServiceClient",
    "MatchServiceError",
    "MatcherController",
    "build_match_payload",
    "card_sections",
    "card_subtitle",
    "unpack_match_response",
]
