"""Data models for the news chat backend."""

from .chat import (
    AnswerFragment,
    ChatEvent,
    ChatRequest,
    ChatRole,
    ChatState,
    Citations,
    ConversationTurn,
    ConversationTurnResponse,
    SessionHistoryResponse,
    SessionLookup,
    SessionStatus,
)
from .news import ContextChunk, IndexRecord, NewsArticle

__all__ = [
    # Chat
    "AnswerFragment",
    "ChatEvent",
    "ChatRequest",
    "ChatRole",
    "ChatState",
    "Citations",
    "ConversationTurn",
    "ConversationTurnResponse",
    "SessionHistoryResponse",
    "SessionLookup",
    "SessionStatus",
    # News
    "ContextChunk",
    "IndexRecord",
    "NewsArticle",
]
