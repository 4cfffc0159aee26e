"""Services for the news chat backend."""

from .chat import ChatExchange, ChatPipeline, get_chat_pipeline
from .generation import AnswerStream, GenerationService, get_generation_service
from .ingestion import IngestionReport, IngestionService
from .session_store import SessionStore, get_session_store

__all__ = [
    "ChatExchange",
    "ChatPipeline",
    "get_chat_pipeline",
    "AnswerStream",
    "GenerationService",
    "get_generation_service",
    "IngestionReport",
    "IngestionService",
    "SessionStore",
    "get_session_store",
]
