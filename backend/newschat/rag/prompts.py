"""Prompt templates for grounded news answers.

All prompts enforce strict grounding in retrieved context.
Key principle: If the answer is not in the news context, the model must say so.
"""

from ..models import ContextChunk, ConversationTurn

REFUSAL_MESSAGE = "I could not find an answer in the provided news articles."

SYSTEM_INSTRUCTION = (
    "You are a helpful news assistant. Answer the user's question based *only* "
    "on the provided context below. Give your answer in detail with points if "
    f'needed. If the answer is not in the context, say "{REFUSAL_MESSAGE}".'
)

CHAT_PROMPT = """{system_instruction}

---
CHAT HISTORY:
{history}
---
RELEVANT NEWS CONTEXT:
{context}
---
USER'S QUESTION:
{question}
---
ANSWER:
"""


def format_history(turns: list[ConversationTurn]) -> str:
    """Format prior turns as role-prefixed lines, oldest first."""
    return "\n".join(f"{turn.role.value}: {turn.text}" for turn in turns)


def format_context(chunks: list[ContextChunk]) -> str:
    """Format retrieved chunks, each labelled with its source.

    Args:
        chunks: Retrieved chunks, best first

    Returns:
        Context string; empty when nothing was retrieved
    """
    return "\n".join(
        f"CONTEXT {i} (Source: {chunk.source_url}):\n{chunk.text}"
        for i, chunk in enumerate(chunks, 1)
    )


def build_chat_prompt(
    question: str,
    history: list[ConversationTurn],
    chunks: list[ContextChunk],
) -> str:
    """Build the single prompt sent to the generation model.

    Pure and deterministic: the same inputs always give the same prompt.

    Args:
        question: The user's current message
        history: Prior turns of the conversation, chronological
        chunks: Retrieved context chunks, best first

    Returns:
        The composed prompt
    """
    return CHAT_PROMPT.format(
        system_instruction=SYSTEM_INSTRUCTION,
        history=format_history(history),
        context=format_context(chunks),
        question=question,
    )


def collect_citations(chunks: list[ContextChunk]) -> list[str]:
    """Distinct non-empty source URLs in order of first appearance."""
    return list(dict.fromkeys(chunk.source_url for chunk in chunks if chunk.source_url))
