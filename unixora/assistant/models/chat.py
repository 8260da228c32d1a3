"""Chat-related Pydantic models."""

from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from unixora.config import get_settings


class MessageType(str, Enum):
    USER = "user"
    BOT = "bot"


class Source(BaseModel):
    """Retrieved passage backing a bot answer."""
    university: str = ""
    program: Optional[str] = None
    text: str = ""

    class Config:
        frozen = True

    @property
    def preview(self) -> str:
        """Source text cut down for display."""
        limit = get_settings().source_preview_chars
        if len(self.text) <= limit:
            return self.text
        return self.text[:limit] + "..."


class Message(BaseModel):
    """Model for a single chat message. Immutable once appended."""
    id: int
    type: MessageType
    text: str
    subtext: Optional[str] = None
    sources: Tuple[Source, ...] = ()
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    is_error: bool = Field(False, alias="isError")

    class Config:
        frozen = True
        populate_by_name = True


class ChatSession(BaseModel):
    """A stored conversation snapshot, as listed in the history sidebar."""
    id: int
    title: str
    messages: Tuple[Message, ...]
    timestamp: str

    class Config:
        frozen = True


class QueryRequest(BaseModel):
    """Request body for the Query Service."""
    query: str
    top_k: int = 5


class QueryResponse(BaseModel):
    """Response body from the Query Service."""
    answer: str
    sources: Tuple[Source, ...] = ()
    confidence: Optional[float] = None
    tavily_used: bool = False

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value):
        if value is None:
            return None
        return min(max(float(value), 0.0), 1.0)

    @field_validator("sources", mode="before")
    @classmethod
    def default_sources(cls, value):
        return value or ()
