"""Error hierarchy for the news chat backend.

Every error carries the HTTP status it maps to when it escapes a request
before any response bytes are sent. Once an answer is streaming, errors
are logged instead and the stream simply ends.
"""


class NewsChatError(Exception):
    """Base exception for all news chat errors."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClientError(NewsChatError):
    """The request is malformed (missing or empty fields)."""

    status_code = 400


class ConfigurationError(NewsChatError):
    """A required credential or setting is missing. Fatal at startup."""


class EmbeddingError(NewsChatError):
    """The embedding provider failed or returned no vector."""

    status_code = 502


class RetrievalError(NewsChatError):
    """The vector index could not be searched."""

    status_code = 503


class VectorStoreError(RetrievalError):
    """A Qdrant operation failed."""


class SessionStoreError(NewsChatError):
    """The session store could not be reached."""

    status_code = 503

    def __init__(self, message: str, session_id: str | None = None):
        super().__init__(
            message,
            {"session_id": session_id} if session_id else {},
        )


class PersistenceError(SessionStoreError):
    """Writing a conversation back to the session store failed."""


class GenerationError(NewsChatError):
    """The answer stream broke."""


class LLMError(GenerationError):
    """The model could not be reached before any fragment was produced."""

    status_code = 503

    def __init__(self, message: str, model: str | None = None):
        super().__init__(
            message,
            {"model": model} if model else {},
        )


class IngestionError(NewsChatError):
    """Fetching articles for a category failed."""

    def __init__(self, message: str, category: str | None = None):
        super().__init__(
            message,
            {"category": category} if category else {},
        )
