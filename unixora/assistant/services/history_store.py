"""In-memory chat history: the active message list plus recent sessions."""

import itertools
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from unixora.config import get_settings
from ..models.chat import ChatSession, Message, MessageType, Source

logger = logging.getLogger(__name__)


class HistoryStore:
    """Holds the active conversation and the most recent stored sessions.

    Sessions are kept most-recent-first and capped at ``limit``; the oldest is
    evicted on insert. A stored session is a snapshot taken when its first
    user message arrives and is never updated afterwards, even if the same
    conversation keeps going in the active list. Loading a session does not
    move it to the front.
    """

    def __init__(self, limit: Optional[int] = None, title_max_chars: Optional[int] = None):
        settings = get_settings()
        self.limit = limit if limit is not None else settings.history_limit
        self.title_max_chars = title_max_chars if title_max_chars is not None else settings.title_max_chars
        self._sessions: List[ChatSession] = []
        self._messages: List[Message] = []
        self._active_session_id: Optional[int] = None
        self._session_ids = itertools.count(1)

    @property
    def messages(self) -> List[Message]:
        """The active message list, oldest first."""
        return list(self._messages)

    @property
    def sessions(self) -> List[ChatSession]:
        """Stored sessions, most recent first."""
        return list(self._sessions)

    @property
    def active_session_id(self) -> Optional[int]:
        return self._active_session_id

    def get_session(self, session_id: int) -> Optional[ChatSession]:
        return next((s for s in self._sessions if s.id == session_id), None)

    def _next_message_id(self) -> int:
        return max((m.id for m in self._messages), default=-1) + 1

    def is_fresh(self) -> bool:
        """True while the active list holds nothing but the greeting."""
        return self._active_session_id is None and len(self._messages) <= 1

    def start_new_session(self, greeting: Optional[Message] = None) -> None:
        """Reset the active list to the greeting and clear the session pointer."""
        self._messages = [greeting] if greeting is not None else []
        self._active_session_id = None

    def append_user_message(self, text: str) -> Message:
        """Append a user message, creating a stored session if this starts one."""
        fresh = self.is_fresh()
        message = Message(id=self._next_message_id(), type=MessageType.USER, text=text)
        self._messages.append(message)

        if fresh:
            session = ChatSession(
                id=next(self._session_ids),
                title=text[:self.title_max_chars],
                messages=tuple(self._messages),
                timestamp=datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p")
            )
            self._sessions.insert(0, session)
            evicted = self._sessions[self.limit:]
            del self._sessions[self.limit:]
            self._active_session_id = session.id
            if evicted:
                logger.debug(f"Evicted {len(evicted)} old session(s) from history")
        return message

    def append_bot_message(
        self,
        text: str,
        subtext: Optional[str] = None,
        sources: Sequence[Source] = (),
        confidence: Optional[float] = None,
        is_error: bool = False
    ) -> Message:
        """Append a bot message to the active list only."""
        message = Message(
            id=self._next_message_id(),
            type=MessageType.BOT,
            text=text,
            subtext=subtext,
            sources=tuple(sources),
            confidence=confidence,
            is_error=is_error
        )
        self._messages.append(message)
        return message

    def load_session(self, session_id: int) -> bool:
        """Show a stored session. Unknown ids leave everything untouched."""
        session = self.get_session(session_id)
        if session is None:
            return False
        self._messages = list(session.messages)
        self._active_session_id = session.id
        return True

    def delete_session(self, session_id: int, greeting: Optional[Message] = None) -> bool:
        """Remove a stored session; deleting the active one starts a new session."""
        before = len(self._sessions)
        self._sessions = [s for s in self._sessions if s.id != session_id]
        if self._active_session_id == session_id:
            self.start_new_session(greeting)
        return len(self._sessions) != before
