"""API module for the news chat backend."""

from .routes import chat_router, health_router

__all__ = [
    "chat_router",
    "health_router",
]
