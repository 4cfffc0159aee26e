"""Streaming answer generation with Ollama.

The answer arrives as a sequence of text fragments. Opening a stream pulls
the first fragment eagerly, so a provider that fails before producing
anything is reported while the request can still receive an error status.
"""

from collections.abc import AsyncIterator
from typing import Any

from langchain_ollama import ChatOllama

from ..config import Settings, get_settings
from ..core import GenerationError, LLMError, get_logger

logger = get_logger(__name__)


def _fragment_text(chunk: Any) -> str:
    """Extract the text of one streamed message chunk."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class AnswerStream:
    """Single-use, pull-based sequence of answer fragments.

    Empty fragments are dropped. A provider failure after the first
    fragment surfaces from iteration as GenerationError. ``aclose()``
    abandons the underlying generation.
    """

    def __init__(self, source: AsyncIterator[Any], model: str | None = None):
        self._source = source
        self._pending: str | None = None
        self._finished = False
        self.model = model
        self.fragments_emitted = 0

    async def _pull(self) -> str | None:
        """Fetch the next non-empty fragment, or None once the source ends."""
        while not self._finished:
            try:
                chunk = await self._source.__anext__()
            except StopAsyncIteration:
                self._finished = True
                return None
            except Exception as e:
                self._finished = True
                logger.error(
                    "Generation stream failed",
                    error=str(e),
                    model=self.model,
                    fragments_emitted=self.fragments_emitted,
                )
                raise GenerationError(
                    f"Generation failed: {e}",
                    {"model": self.model, "fragments_emitted": self.fragments_emitted},
                ) from e

            text = _fragment_text(chunk)
            if text:
                return text
        return None

    async def prime(self) -> None:
        """Pull the first fragment ahead of iteration."""
        self._pending = await self._pull()

    def __aiter__(self) -> "AnswerStream":
        return self

    async def __anext__(self) -> str:
        if self._pending is not None:
            fragment, self._pending = self._pending, None
        else:
            fragment = await self._pull()
            if fragment is None:
                raise StopAsyncIteration

        self.fragments_emitted += 1
        return fragment

    async def aclose(self) -> None:
        """Stop consuming the provider stream."""
        self._finished = True
        self._pending = None
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


class GenerationService:
    """Service for streaming answers from the LLM."""

    def __init__(
        self,
        settings: Settings | None = None,
        llm: ChatOllama | None = None,
    ):
        """Initialize generation service.

        Args:
            settings: Application settings. Defaults to the cached settings.
            llm: Chat model. Created on first use if omitted.
        """
        self.settings = settings or get_settings()
        self.model = self.settings.generation_model
        self._llm = llm

    @property
    def llm(self) -> ChatOllama:
        """Lazy-load the chat model."""
        if self._llm is None:
            self._llm = ChatOllama(
                model=self.model,
                base_url=self.settings.ollama_base_url,
                temperature=self.settings.generation_temperature,
                num_ctx=self.settings.ollama_num_ctx,
            )
            logger.info(
                "Created LLM instance",
                model=self.model,
                num_ctx=self.settings.ollama_num_ctx,
            )
        return self._llm

    async def open_stream(self, prompt: str) -> AnswerStream:
        """Start generating an answer for a composed prompt.

        Args:
            prompt: The full prompt

        Returns:
            An AnswerStream positioned before its first fragment

        Raises:
            LLMError: If the provider fails before producing any fragment
        """
        logger.info(
            "Generating with LLM",
            model=self.model,
            prompt_length=len(prompt),
        )

        try:
            stream = AnswerStream(self.llm.astream(prompt), model=self.model)
            await stream.prime()
        except GenerationError as e:
            raise LLMError(e.message, model=self.model) from e
        except Exception as e:
            logger.error("Failed to start generation", error=str(e), model=self.model)
            raise LLMError(f"Failed to start generation: {e}", model=self.model) from e

        return stream


# Singleton instance
_generation_service: GenerationService | None = None


def get_generation_service() -> GenerationService:
    """Get the singleton generation service instance."""
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service
