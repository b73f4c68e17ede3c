"""Text chunking with overlap for RAG pipeline.

Implements word-based sliding windows so chunk boundaries are independent
of any tokenizer and identical across runs.
"""
import hashlib
from typing import List, Optional
import structlog

from pdfchat import config

logger = structlog.get_logger()


def _validate(size: int, overlap: int) -> None:
    if overlap < 0:
        raise ValueError(f"Overlap ({overlap}) must not be negative")
    if overlap >= size:
        raise ValueError(
            f"Overlap ({overlap}) must be less than chunk size ({size})"
        )


def chunk_words(text: str, size: int, overlap: int) -> List[str]:
    """Split text into overlapping windows of whitespace-delimited words.

    Text with at most ``size`` words comes back unchanged as a single
    chunk. Longer text is cut into windows of ``size`` words advancing by
    ``size - overlap``; the last window is clipped to the remaining words.

    Args:
        text: Text to chunk
        size: Words per chunk
        overlap: Words shared by consecutive chunks

    Returns:
        List of chunk strings (empty for blank text)

    Raises:
        ValueError: If overlap is negative or not smaller than size
    """
    _validate(size, overlap)

    words = text.split()
    if not words:
        return []

    if len(words) <= size:
        return [text]

    step = size - overlap
    chunks = []
    for start in range(0, len(words), step):
        end = min(start + size, len(words))
        chunks.append(" ".join(words[start:end]))
        if end == len(words):
            break

    return chunks


def make_chunk_id(chunk: str, chunk_index: int, page: Optional[int] = None) -> str:
    """Build a stable, human-readable id for a chunk.

    The id combines the page, the chunk position and the first four bytes
    of the MD5 digest of the chunk text.

    Args:
        chunk: Exact chunk text
        chunk_index: Position of the chunk within its page or source
        page: 1-based page number, or None for page-less text

    Returns:
        ``page_{page}_chunk_{index}_{hash}`` or ``txt_chunk_{index}_{hash}``
    """
    fingerprint = hashlib.md5(chunk.encode("utf-8")).digest()[:4].hex()
    if page is None:
        return f"txt_chunk_{chunk_index}_{fingerprint}"
    return f"page_{page}_chunk_{chunk_index}_{fingerprint}"


class WordChunker:
    """Word-based text chunker with overlap support."""

    def __init__(
        self,
        chunk_size: int = None,
        chunk_overlap: int = None,
    ):
        """Initialize the text chunker.

        Args:
            chunk_size: Size of each chunk in words (default from config)
            chunk_overlap: Overlap between chunks in words (default from config)
        """
        self.chunk_size = config.CHUNK_SIZE if chunk_size is None else chunk_size
        self.chunk_overlap = (
            config.CHUNK_OVERLAP if chunk_overlap is None else chunk_overlap
        )

        _validate(self.chunk_size, self.chunk_overlap)

        logger.debug(
            "chunker_initialized",
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

    def chunk_text(self, text: str) -> List[str]:
        """Split text into overlapping chunks using the configured window."""
        chunks = chunk_words(text, self.chunk_size, self.chunk_overlap)

        if chunks:
            logger.debug(
                "text_chunked",
                word_count=len(text.split()),
                chunk_count=len(chunks),
            )

        return chunks

    def get_chunk_stats(self, chunks: List[str]) -> dict:
        """Summarize the windows produced for one ingestion.

        Every key is present for an empty list too, with zero sizes.
        """
        char_sizes = [len(c) for c in chunks] or [0]
        word_sizes = [len(c.split()) for c in chunks] or [0]

        return {
            "chunk_count": len(chunks),
            "chunk_size": self.chunk_size,
            "overlap": self.chunk_overlap,
            "total_words": sum(word_sizes),
            "avg_chunk_chars": sum(char_sizes) // max(len(chunks), 1),
            "min_chunk_chars": min(char_sizes),
            "max_chunk_chars": max(char_sizes),
        }
