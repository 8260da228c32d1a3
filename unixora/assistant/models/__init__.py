"""Assistant Pydantic models."""

from .chat import ChatSession, Message, MessageType, QueryRequest, QueryResponse, Source

__all__ = ["ChatSession", "Message", "MessageType", "QueryRequest", "QueryResponse", "Source"]
