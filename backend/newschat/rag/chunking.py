"""Fixed-size character chunking for news text.

Chunks overlap so a sentence cut at a boundary still appears whole in one
of the neighbouring chunks.
"""

from ..config import get_settings


def chunk_text(
    text: str,
    chunk_size: int | None = None,
    overlap: int | None = None,
) -> list[str]:
    """Split text into overlapping windows of at most chunk_size characters.

    Args:
        text: Text to split
        chunk_size: Window length. Defaults to settings value.
        overlap: Characters shared by consecutive windows. Defaults to settings value.

    Returns:
        List of chunks, empty for empty text

    Raises:
        ValueError: If overlap is not smaller than chunk_size
    """
    if chunk_size is None or overlap is None:
        settings = get_settings()
        chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        overlap = overlap if overlap is not None else settings.chunk_overlap

    if chunk_size <= 0 or overlap < 0 or overlap >= chunk_size:
        raise ValueError(
            f"Invalid chunking parameters: chunk_size={chunk_size}, overlap={overlap}"
        )

    if not text:
        return []

    step = chunk_size - overlap
    chunks = []
    for start in range(0, len(text), step):
        chunks.append(text[start : start + chunk_size])
        if start + chunk_size >= len(text):
            break
    return chunks
