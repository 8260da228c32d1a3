"""Conversation controller: submission, loading state and error capture."""

import asyncio
import html
import logging
from enum import Enum
from typing import List, Optional

from unixora.client.session_context import SessionContext
from ..models.chat import ChatSession, Message, MessageType
from ..utils.formatter import format_message
from .history_store import HistoryStore
from .query_client import QueryServiceClient, QueryServiceError

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I encountered an error while processing your request. Please try again."
BANNER_ERROR = "Failed to get a response. Please check if the API server is running."
GREETING_SUBTEXT = "I am ready to help you"


class ConversationState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class PendingQuery:
    """Handle for the single in-flight query.

    Cancelling marks the handle so whatever the task produces is discarded,
    even if the task already finished and only the caller has yet to resume.
    """

    def __init__(self, query: str, task: asyncio.Future):
        self.query = query
        self.task = task
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        if not self.task.done():
            self.task.cancel()


def build_greeting(first_name: Optional[str]) -> Message:
    return Message(
        id=0,
        type=MessageType.BOT,
        text=f"Good Morning, {first_name or 'there'}!",
        subtext=GREETING_SUBTEXT
    )


def render_message(message: Message) -> str:
    """HTML for one message; only bot text goes through the formatter."""
    if message.type is MessageType.BOT:
        return format_message(message.text)
    return html.escape(message.text)


class ConversationController:
    """Drives one chat page: at most one query in flight, never queued."""

    def __init__(
        self,
        query_client: QueryServiceClient,
        context: SessionContext,
        store: Optional[HistoryStore] = None
    ):
        self.query_client = query_client
        self.context = context
        self.profile = context.require_profile()
        self.store = store or HistoryStore()
        self.state = ConversationState.IDLE
        self.error: Optional[str] = None
        self._pending: Optional[PendingQuery] = None
        self.store.start_new_session(self.greeting())

    # ─────────────────────────── read accessors ───────────────────────────
    @property
    def messages(self) -> List[Message]:
        return self.store.messages

    @property
    def sessions(self) -> List[ChatSession]:
        return self.store.sessions

    @property
    def active_session_id(self) -> Optional[int]:
        return self.store.active_session_id

    @property
    def is_loading(self) -> bool:
        return self.state is ConversationState.AWAITING_RESPONSE

    def greeting(self) -> Message:
        return build_greeting(self.profile.get("firstName"))

    # ─────────────────────────── user actions ───────────────────────────
    async def submit(self, text: str) -> bool:
        """Send a question. Returns False when the submission was ignored."""
        if not text or not text.strip():
            return False
        if self.state is ConversationState.AWAITING_RESPONSE:
            logger.info("Ignoring submit while a query is in flight")
            return False

        self.store.append_user_message(text)
        self.error = None
        self.state = ConversationState.AWAITING_RESPONSE

        pending = PendingQuery(text, asyncio.ensure_future(self.query_client.query(text)))
        self._pending = pending
        try:
            response = await pending.task
        except asyncio.CancelledError:
            if not pending.cancelled:
                raise
            logger.info("Discarded cancelled query")
            return True
        except QueryServiceError as e:
            if pending.cancelled:
                logger.info("Discarded failure of a cancelled query")
                return True
            logger.error(f"Query failed: {e}")
            self.store.append_bot_message(ERROR_REPLY, is_error=True)
            self.error = BANNER_ERROR
        else:
            if pending.cancelled:
                logger.info("Discarded response of a cancelled query")
                return True
            self.store.append_bot_message(
                response.answer,
                sources=response.sources,
                confidence=response.confidence
            )
        finally:
            if self._pending is pending:
                self._pending = None
                self.state = ConversationState.IDLE
        return True

    def cancel_pending(self) -> None:
        """Abort the in-flight query, if any, and return to idle."""
        if self._pending is not None:
            logger.debug(f"Cancelling in-flight query: {self._pending.query[:50]}")
            self._pending.cancel()
            self._pending = None
        self.state = ConversationState.IDLE

    def new_chat(self) -> None:
        self.cancel_pending()
        self.store.start_new_session(self.greeting())

    def load_session(self, session_id: int) -> bool:
        """Open a stored session; unknown ids change nothing."""
        if self.store.get_session(session_id) is None:
            return False
        self.cancel_pending()
        return self.store.load_session(session_id)

    def delete_session(self, session_id: int) -> bool:
        if self.store.active_session_id == session_id:
            self.cancel_pending()
        return self.store.delete_session(session_id, greeting=self.greeting())

    def dismiss_error(self) -> None:
        """Clear the banner error; chat messages are left as they are."""
        self.error = None
