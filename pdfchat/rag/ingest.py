"""Ingest pipeline for indexing a single document.

Orchestrates:
- Source extraction and cleanup
- Word-window chunking
- Per-chunk embedding generation
- Wholesale replacement and persistence of the vector store
"""
import asyncio
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import structlog

from pdfchat import config
from pdfchat.errors import (
    DimensionMismatch,
    EmbeddingUnavailable,
    ExtractionFailure,
    SourceTooShort,
    StoreWriteError,
)
from pdfchat.llm_client import OllamaClient
from pdfchat.rag.chunker import WordChunker, make_chunk_id
from pdfchat.rag.extract import PageText, clean_text, extract_pdf_pages, read_text_file
from pdfchat.rag.store import Document, VectorStore

logger = structlog.get_logger()

ProgressCallback = Callable[[int, int, int], None]


class IngestPipeline:
    """Pipeline that turns one source document into the vector store contents."""

    def __init__(
        self,
        store: VectorStore,
        client: OllamaClient,
        chunker: WordChunker = None,
        embedding_model: str = None,
        request_delay: float = None,
        min_chunk_chars: int = None,
        min_source_chars: int = None,
    ):
        """Initialize the ingest pipeline.

        Args:
            store: Vector store replaced by each ingestion
            client: Ollama client used for embeddings
            chunker: Word chunker (default size/overlap from config)
            embedding_model: Embedding model name (default from config)
            request_delay: Seconds to wait after each embedding request
            min_chunk_chars: Chunks shorter than this once trimmed are skipped
            min_source_chars: Sources shorter than this after cleanup are rejected
        """
        self.store = store
        self.client = client
        self.chunker = chunker or WordChunker()
        self.embedding_model = embedding_model or config.EMBEDDING_MODEL
        self.request_delay = (
            config.EMBED_REQUEST_DELAY if request_delay is None else request_delay
        )
        self.min_chunk_chars = (
            config.MIN_CHUNK_CHARS if min_chunk_chars is None else min_chunk_chars
        )
        self.min_source_chars = (
            config.MIN_SOURCE_CHARS if min_source_chars is None else min_source_chars
        )

        self.stats = self._empty_stats()
        self.chunk_stats = self.chunker.get_chunk_stats([])

        logger.info(
            "ingest_pipeline_initialized",
            embedding_model=self.embedding_model,
            chunk_size=self.chunker.chunk_size,
            chunk_overlap=self.chunker.chunk_overlap,
            request_delay=self.request_delay,
        )

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            "pages_processed": 0,
            "chunks_created": 0,
            "chunks_skipped": 0,
            "embeddings_generated": 0,
            "embeddings_failed": 0,
        }

    async def ingest_file(
        self, file_path: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        """Ingest a PDF or TXT file, chosen by its suffix.

        Raises:
            ExtractionFailure: For unsupported or unreadable files
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()

        if suffix == ".pdf":
            return await self.ingest_pdf(file_path, progress_callback)
        if suffix == ".txt":
            return await self.ingest_txt(file_path, progress_callback)

        raise ExtractionFailure(f"Unsupported file type: {file_path.suffix or file_path.name}")

    async def ingest_pdf(
        self, file_path: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        """Extract a PDF page by page and ingest it.

        Returns:
            Number of chunks embedded

        Raises:
            ExtractionFailure: If the PDF cannot be read or has no usable text
        """
        logger.info("ingesting_pdf", path=str(file_path))

        pages = extract_pdf_pages(file_path, min_chars=self.min_source_chars)
        if not pages:
            raise SourceTooShort(f"No page with usable text in {file_path}")

        return await self._ingest(pages, paged=True, progress_callback=progress_callback)

    async def ingest_txt(
        self, file_path: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        """Read a text file and ingest it as one page-less blob."""
        logger.info("ingesting_txt", path=str(file_path))

        text = read_text_file(file_path)
        return await self.ingest_text(text, progress_callback=progress_callback)

    async def ingest_text(
        self, text: str, progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        """Ingest a page-less text blob, stored as page 1.

        Raises:
            SourceTooShort: If the cleaned text is below the minimum length
        """
        cleaned = clean_text(text)
        if len(cleaned) < self.min_source_chars:
            raise SourceTooShort(
                f"Text too short or empty ({len(cleaned)} characters after cleanup)"
            )

        pages = [PageText(page_number=1, text=cleaned)]
        return await self._ingest(pages, paged=False, progress_callback=progress_callback)

    async def ingest_pages(
        self,
        pages: Sequence[str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """Ingest already-extracted page texts, numbered 1..n by position.

        Raises:
            SourceTooShort: If the combined cleaned text is below the minimum length
        """
        page_texts = [
            PageText(page_number=number, text=clean_text(text))
            for number, text in enumerate(pages, 1)
        ]

        total_chars = sum(len(page.text) for page in page_texts)
        if total_chars < self.min_source_chars:
            raise SourceTooShort(
                f"Pages too short or empty ({total_chars} characters after cleanup)"
            )

        return await self._ingest(page_texts, paged=True, progress_callback=progress_callback)

    async def _embed_document(self, chunk: str, chunk_id: str, page: int) -> Optional[Document]:
        try:
            vector = await self.client.embed(chunk, model=self.embedding_model)
        except EmbeddingUnavailable as e:
            logger.error("chunk_embedding_failed", chunk_id=chunk_id, error=str(e))
            self.stats["embeddings_failed"] += 1
            return None

        self.stats["embeddings_generated"] += 1
        return Document(id=chunk_id, content=chunk, page=page, vector=vector)

    async def _ingest(
        self,
        pages: List[PageText],
        paged: bool,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        self.stats = self._empty_stats()

        chunked = [(page, self.chunker.chunk_text(page.text)) for page in pages]
        total_chunks = sum(len(chunks) for _, chunks in chunked)
        self.chunk_stats = self.chunker.get_chunk_stats(
            [chunk for _, chunks in chunked for chunk in chunks]
        )

        logger.info(
            "ingest_started",
            page_count=len(pages),
            chunk_count=total_chunks,
            embedding_model=self.embedding_model,
        )
        logger.debug("text_chunked", **self.chunk_stats)

        previous_documents = self.store.documents
        previous_model = self.store.model_name
        self.store.replace_all()
        current = 0

        for page, chunks in chunked:
            for chunk_index, chunk in enumerate(chunks):
                current += 1
                if progress_callback:
                    progress_callback(current, total_chunks, page.page_number)

                if len(chunk.strip()) < self.min_chunk_chars:
                    self.stats["chunks_skipped"] += 1
                    logger.debug(
                        "chunk_too_short_skipped",
                        page=page.page_number,
                        chunk_index=chunk_index,
                    )
                    continue

                chunk_id = make_chunk_id(
                    chunk, chunk_index, page.page_number if paged else None
                )

                document = await self._embed_document(chunk, chunk_id, page.page_number)

                if document is not None:
                    try:
                        self.store.append(document)
                        self.stats["chunks_created"] += 1
                    except DimensionMismatch as e:
                        logger.warning("chunk_dimension_mismatch", chunk_id=chunk_id, error=str(e))
                        self.stats["embeddings_failed"] += 1

                if self.request_delay > 0:
                    await asyncio.sleep(self.request_delay)

            self.stats["pages_processed"] += 1

        self.store.model_name = self.embedding_model
        try:
            self.store.save()
        except StoreWriteError:
            # The file still holds the previous index; keep memory in step with it.
            self.store.replace_all(previous_documents)
            self.store.model_name = previous_model
            logger.error("ingest_save_failed_restored", document_count=len(self.store))
            raise

        logger.info("ingest_completed", stats=self.stats)

        return self.stats["chunks_created"]
