"""Interactive console menu for the offline document chatbot."""
import asyncio
import logging
import sys
import time
from pathlib import Path

import structlog

from pdfchat import config
from pdfchat.chatbot import RAGChatbot
from pdfchat.errors import BackendUnreachable, PdfChatError


def configure_logging(level: str = None) -> None:
    """Configure structured logging for console entry points."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.WARNING),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


MENU = """
📋 Available options:
1. Process a new document (PDF or TXT)
2. Ask a question
3. Show database statistics
4. Quit
"""


def print_stats(chatbot: RAGChatbot) -> None:
    stats = chatbot.stats()
    print("\n📊 Database statistics:")
    print("─────────────────────")
    print(f"📄 Total chunks:     {stats['document_count']}")
    print(f"🔤 Embedding model:  {stats['model_name'] or '-'}")

    if stats["document_count"] > 0:
        print(f"📖 Pages processed:  {stats['page_count']}")
        print(f"📊 Total characters: {stats['total_chars']}")
        print(f"📏 Avg chars/chunk:  {stats['avg_chunk_chars']:.0f}")


async def process_document(chatbot: RAGChatbot, raw_path: str) -> None:
    path = Path(raw_path.strip().strip('"')).expanduser()
    if not path.exists():
        print("❌ File not found")
        return

    print(f"\n🚀 Processing {path.name}...")
    start = time.perf_counter()

    def on_progress(current: int, total: int, page: int) -> None:
        print(f"🔄 Processing chunk {current}/{total} (page {page})", end="\r", flush=True)

    try:
        count = await chatbot.ingest_file(path, progress_callback=on_progress)
    except PdfChatError as e:
        print(f"\n❌ Error: {e}")
        return

    elapsed = time.perf_counter() - start
    print(f"\n✅ Created {count} chunks with embeddings in {elapsed:.1f}s")
    print(f"📊 Chunks in database: {len(chatbot.store)}")


async def ask_question(chatbot: RAGChatbot, question: str) -> None:
    question = question.strip()
    if not question:
        return

    print("\n🤔 Thinking...")
    start = time.perf_counter()

    try:
        result = await chatbot.chat(question)
    except PdfChatError as e:
        print(f"❌ Error: {e}")
        return

    elapsed = time.perf_counter() - start
    print(f"\n💬 Answer (generated in {elapsed:.1f}s):")
    print("─────────────────────────────────")
    print(result.answer)

    if result.sources:
        print("\n📚 Sources used:")
        for i, source in enumerate(result.sources, 1):
            print(f"\n🔹 Source {i} (Page {source.page}):")
            print(source.content)


async def warn_missing_model(chatbot: RAGChatbot) -> None:
    try:
        models = await chatbot.client.list_models()
    except BackendUnreachable:
        print("⚠️  Could not read the Ollama model list")
        return

    if not any(name.split(":")[0] == chatbot.embedding_model.split(":")[0] for name in models):
        print(f"⚠️  Embedding model '{chatbot.embedding_model}' not found, run `ollama pull {chatbot.embedding_model}`")


async def run() -> int:
    chatbot = RAGChatbot()

    print("🤖 Offline RAG Chatbot for PDF documents")
    print("=====================================")

    print("🔍 Checking Ollama availability...")
    try:
        await chatbot.check_backend()
    except BackendUnreachable as e:
        print(f"❌ {e}")
        return 1
    print("✅ Ollama available")
    await warn_missing_model(chatbot)

    print("📂 Loading existing database...")
    if chatbot.load_index():
        print(f"✅ Database loaded: {len(chatbot.store)} chunks")
    else:
        print("⚠️  No existing database found")

    while True:
        print(MENU)
        try:
            choice = input("Choose an option (1-4): ").strip()
        except EOFError:
            choice = "4"

        if choice == "1":
            await process_document(chatbot, input("\n📄 Path of the PDF or TXT file: "))
        elif choice == "2":
            if chatbot.store.is_empty:
                print("⚠️  Load a document first!")
                continue
            await ask_question(chatbot, input("\n❓ Your question: "))
        elif choice == "3":
            print_stats(chatbot)
        elif choice == "4":
            print("\n👋 Goodbye!")
            return 0
        else:
            print("❌ Invalid option")


def main() -> None:
    configure_logging()
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(130)


if __name__ == "__main__":
    main()
