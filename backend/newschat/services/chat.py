"""Chat pipeline for retrieval-augmented news answers.

A request moves through validating, loading history, embedding,
retrieving, prompting, streaming, persisting and done. Every failure up
to and including opening the answer stream is raised to the caller so it
can still be reported with a status code. Once streaming has started,
errors are only logged and the stream simply ends.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field

from ..config import Settings, get_settings
from ..core import (
    ClientError,
    EmbeddingError,
    GenerationError,
    NewsChatError,
    PersistenceError,
    SessionStoreError,
    get_logger,
)
from ..models import (
    AnswerFragment,
    ChatEvent,
    ChatRole,
    ChatState,
    Citations,
    ContextChunk,
    ConversationTurn,
    SessionLookup,
    SessionStatus,
)
from ..rag import (
    EmbeddingIntent,
    EmbeddingService,
    VectorStore,
    build_chat_prompt,
    collect_citations,
    get_embedding_service,
    get_vector_store,
)
from .generation import AnswerStream, GenerationService, get_generation_service
from .session_store import SessionStore, get_session_store

logger = get_logger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


@dataclass
class ChatExchange:
    """State of one user message and its answer."""

    session_id: str
    message: str
    history: list[ConversationTurn]
    chunks: list[ContextChunk]
    prompt: str
    answer_stream: AnswerStream
    fragments: list[str] = field(default_factory=list)
    state: ChatState = ChatState.STREAMING
    disconnected: bool = False
    started_at: float = field(default_factory=time.time)

    @property
    def answer(self) -> str:
        """Everything generated so far."""
        return "".join(self.fragments)

    @property
    def citations(self) -> list[str]:
        return collect_citations(self.chunks)


class ChatPipeline:
    """Orchestrates history, retrieval, generation and persistence."""

    def __init__(
        self,
        session_store: SessionStore,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        generation_service: GenerationService,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.session_store = session_store
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.generation_service = generation_service
        self._background_tasks: set[asyncio.Task] = set()

    async def prepare(self, message: str | None, session_id: str | None) -> ChatExchange:
        """Run every step up to the first answer fragment.

        Nothing is written to the session store here, so a failure leaves
        the conversation untouched.

        Args:
            message: The user's message
            session_id: Opaque conversation identifier

        Returns:
            A ChatExchange ready to be streamed

        Raises:
            ClientError: If message or session_id is missing or blank
            SessionStoreError: If the session store is unreachable
            EmbeddingError: If the query cannot be embedded
            RetrievalError: If the vector index cannot be searched
            GenerationError: If generation fails before its first fragment
        """
        state = ChatState.VALIDATING
        try:
            if not message or not message.strip() or not session_id or not session_id.strip():
                raise ClientError("Missing 'message' or 'sessionId' in request body.")

            state = ChatState.LOADING_HISTORY
            lookup = await self.session_store.get(session_id)
            if lookup.status == SessionStatus.UNAVAILABLE:
                raise SessionStoreError("Session store is unavailable", session_id)
            history = lookup.turns

            state = ChatState.EMBEDDING
            query_vector = await self.embedding_service.embed(message, EmbeddingIntent.QUERY)
            if not query_vector:
                raise EmbeddingError("Embedding provider returned an empty vector")

            state = ChatState.RETRIEVING
            chunks = await self.vector_store.search(
                query_vector,
                top_k=self.settings.top_k_retrieval,
            )
            if not chunks:
                logger.warning("No context retrieved for chat message", session_id=session_id)

            state = ChatState.PROMPTING
            prompt = build_chat_prompt(message, history, chunks)

            state = ChatState.STREAMING
            answer_stream = await self.generation_service.open_stream(prompt)

        except NewsChatError as e:
            logger.error(
                "Chat request failed",
                session_id=session_id,
                failed_state=state.value,
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

        logger.info(
            "Chat exchange prepared",
            session_id=session_id,
            history_turns=len(history),
            chunks_retrieved=len(chunks),
            new_session=lookup.status == SessionStatus.NOT_FOUND,
        )

        return ChatExchange(
            session_id=session_id,
            message=message,
            history=history,
            chunks=chunks,
            prompt=prompt,
            answer_stream=answer_stream,
        )

    async def stream(
        self,
        exchange: ChatExchange,
        is_disconnected: DisconnectCheck | None = None,
    ) -> AsyncIterator[ChatEvent]:
        """Yield answer fragments, then citations, then persist the exchange.

        Each fragment is accumulated before it is forwarded. If the caller
        goes away, consumption stops and whatever was produced is persisted.

        Args:
            exchange: A prepared exchange
            is_disconnected: Optional coroutine reporting whether the caller left

        Yields:
            AnswerFragment events followed by a single Citations event
        """
        exchange.state = ChatState.STREAMING
        try:
            try:
                async for fragment in exchange.answer_stream:
                    exchange.fragments.append(fragment)
                    yield AnswerFragment(fragment)

                    if is_disconnected is not None and await is_disconnected():
                        exchange.disconnected = True
                        logger.info(
                            "Client disconnected during streaming",
                            session_id=exchange.session_id,
                            fragments_sent=len(exchange.fragments),
                        )
                        break
            except GenerationError as e:
                logger.exception(
                    "Generation failed mid-stream",
                    session_id=exchange.session_id,
                    fragments_sent=len(exchange.fragments),
                    error=e.message,
                )

            # A departed caller cannot receive the sources event
            if not exchange.disconnected:
                yield Citations(exchange.citations)
        finally:
            await self._finish(exchange)

    async def _finish(self, exchange: ChatExchange) -> None:
        """Run persistence to completion even if the caller is cancelled."""
        task = asyncio.create_task(self._persist(exchange))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        await asyncio.shield(task)

    async def _persist(self, exchange: ChatExchange) -> None:
        """Append the user and assistant turns and write them back."""
        try:
            await exchange.answer_stream.aclose()
        except Exception as e:
            logger.warning(
                "Failed to close answer stream",
                session_id=exchange.session_id,
                error=str(e),
            )

        exchange.state = ChatState.PERSISTING
        turns = [
            *exchange.history,
            ConversationTurn(role=ChatRole.USER, text=exchange.message),
            ConversationTurn(role=ChatRole.ASSISTANT, text=exchange.answer),
        ]

        try:
            await self.session_store.save(
                exchange.session_id,
                turns,
                ttl_seconds=self.settings.session_ttl_seconds,
            )
        except PersistenceError as e:
            logger.error(
                "Failed to persist conversation",
                session_id=exchange.session_id,
                error=e.message,
            )
            exchange.state = ChatState.FAILED
            return

        exchange.state = ChatState.DONE
        logger.audit(
            action="chat_exchange_completed",
            resource_type="session",
            resource_id=exchange.session_id,
            turn_count=len(turns),
            fragments=len(exchange.fragments),
            answer_length=len(exchange.answer),
            sources_count=len(exchange.citations),
            disconnected=exchange.disconnected,
            duration_ms=round((time.time() - exchange.started_at) * 1000, 1),
        )

    async def history(self, session_id: str) -> SessionLookup:
        """Read the stored transcript for a session."""
        return await self.session_store.get(session_id)


# Singleton instance
_chat_pipeline: ChatPipeline | None = None


def get_chat_pipeline() -> ChatPipeline:
    """Get the singleton chat pipeline, wired to the real clients."""
    global _chat_pipeline
    if _chat_pipeline is None:
        _chat_pipeline = ChatPipeline(
            session_store=get_session_store(),
            embedding_service=get_embedding_service(),
            vector_store=get_vector_store(),
            generation_service=get_generation_service(),
        )
    return _chat_pipeline
