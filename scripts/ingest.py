#!/usr/bin/env python
"""Ingest a PDF or TXT document into the vector store.

Usage:
    python scripts/ingest.py manual.pdf              # Index a PDF
    python scripts/ingest.py notes.txt --verbose     # Show one line per chunk
    python scripts/ingest.py manual.pdf --delay 0    # No pause between requests
"""
import argparse
import asyncio
import sys
from pathlib import Path
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdfchat import config
from pdfchat.chatbot import RAGChatbot
from pdfchat.errors import BackendUnreachable, PdfChatError
from pdfchat.main import configure_logging
import structlog

logger = structlog.get_logger()


class ProgressReporter:
    """Simple progress reporter for CLI."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.start_time = None

    def start(self, message: str):
        """Start progress reporting."""
        self.start_time = datetime.now()
        print(f"\n{'=' * 60}")
        print(f"  {message}")
        print(f"{'=' * 60}\n")

    def update(self, current: int, total: int, page: int):
        """Update progress."""
        percentage = (current / total) * 100 if total > 0 else 0
        bar_length = 40
        filled = int(bar_length * current / total) if total > 0 else 0
        bar = "█" * filled + "░" * (bar_length - filled)

        print(
            f"\r  [{bar}] {percentage:5.1f}% ({current}/{total}) page {page:<5}",
            end="",
            flush=True,
        )

        if self.verbose:
            print()

    def finish(self, stats: dict, chunk_stats: dict = None):
        """Finish progress reporting."""
        print("\n")
        elapsed_seconds = (datetime.now() - self.start_time).total_seconds()

        print(f"{'=' * 60}")
        print(f"  Ingestion Complete!")
        print(f"{'=' * 60}\n")
        print(f"  📖 Pages processed:      {stats['pages_processed']}")
        print(f"  📝 Chunks stored:        {stats['chunks_created']}")
        print(f"  ✂️  Chunks too short:     {stats['chunks_skipped']}")
        print(f"  ❌ Embeddings failed:    {stats['embeddings_failed']}")
        if chunk_stats and chunk_stats["chunk_count"] > 0:
            print(f"  📏 Avg chars/chunk:      {chunk_stats['avg_chunk_chars']}")
            print(f"  🔤 Words chunked:        {chunk_stats['total_words']}")
        print(f"  ⏱️  Time elapsed:         {elapsed_seconds:.1f}s")

        if stats["chunks_created"] > 0 and elapsed_seconds > 0:
            rate = stats["chunks_created"] / elapsed_seconds
            print(f"  ⚡ Indexing rate:        {rate:.1f} chunks/sec")

        print(f"\n{'=' * 60}\n")

        if stats["embeddings_failed"] > 0:
            print(f"⚠️  Warning: {stats['embeddings_failed']} chunk(s) could not be embedded.")
            print(f"   Check logs for details.\n")


async def main():
    """Main entry point for ingest script."""
    parser = argparse.ArgumentParser(
        description="Ingest a PDF or TXT document for the RAG chatbot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("path", type=Path, help="PDF or TXT file to ingest")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show verbose progress output",
    )

    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help=f"Seconds between embedding requests (default: {config.EMBED_REQUEST_DELAY})",
    )

    args = parser.parse_args()

    configure_logging("INFO" if args.verbose else None)
    progress = ProgressReporter(verbose=args.verbose)
    chatbot = RAGChatbot(request_delay=args.delay)

    print("\n📋 Configuration:")
    print(f"   Source:           {args.path}")
    print(f"   Embedding model:  {chatbot.embedding_model}")
    print(f"   Chunk size:       {config.CHUNK_SIZE} words")
    print(f"   Chunk overlap:    {config.CHUNK_OVERLAP} words")
    print(f"   Store:            {chatbot.store.path}")

    try:
        await chatbot.check_backend()

        progress.start(f"Ingesting {args.path.name}")
        await chatbot.ingest_file(args.path, progress_callback=progress.update)
        progress.finish(chatbot.pipeline.stats, chatbot.pipeline.chunk_stats)

    except BackendUnreachable as e:
        print(f"\n❌ {e}\n")
        sys.exit(1)

    except PdfChatError as e:
        print(f"\n❌ Error: {e}\n")
        logger.error("ingest_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


def run() -> None:
    """Run the ingest script, turning Ctrl+C into a short message."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\n⚠️  Ingestion cancelled by user.\n")
        sys.exit(130)


if __name__ == "__main__":
    run()
