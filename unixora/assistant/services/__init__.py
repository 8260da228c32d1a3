"""Assistant services."""

from .history_store import HistoryStore
from .query_client import QueryServiceClient, QueryServiceError
from .conversation_controller import ConversationController, ConversationState

__all__ = [
    "HistoryStore",
    "QueryServiceClient",
    "QueryServiceError",
    "ConversationController",
    "ConversationState",
]
