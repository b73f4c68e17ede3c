"""Chatbot that answers questions grounded in the ingested document."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import structlog

from pdfchat import config
from pdfchat.llm_client import OllamaClient
from pdfchat.rag.chunker import WordChunker
from pdfchat.rag.ingest import IngestPipeline, ProgressCallback
from pdfchat.rag.retriever import Retriever
from pdfchat.rag.store import Document, VectorStore

logger = structlog.get_logger()

NO_DOCUMENT_MESSAGE = "Please load a document first."

PROMPT_TEMPLATE = """You are an assistant that answers questions using only the document provided.

{context}
Question: {question}

Instructions:
- Answer ONLY in {language}
- Use EXCLUSIVELY the information in the given context
- If the answer is not in the document, say so clearly
- Be precise and detailed
- Cite the page when possible

Answer:"""


@dataclass
class ChatAnswer:
    """Generated answer with the chunks it was grounded on."""

    answer: str
    sources: List[Document] = field(default_factory=list)


def build_context(chunks: Sequence[Document]) -> str:
    """Format retrieved chunks as numbered, page-labelled sections."""
    parts = ["Context from the document:\n\n"]
    for i, doc in enumerate(chunks, 1):
        parts.append(f"Section {i} (Page {doc.page}):\n{doc.content}\n\n")
    return "".join(parts)


class RAGChatbot:
    """Owns the vector store, the Ollama client and the pipelines built on them."""

    def __init__(
        self,
        store: VectorStore = None,
        client: OllamaClient = None,
        embedding_model: str = None,
        chat_model: str = None,
        top_k: int = None,
        language: str = None,
        request_delay: float = None,
    ):
        """Initialize the chatbot.

        Args:
            store: Vector store (default: empty store at config.STORE_PATH)
            client: Ollama client (default: client for config.OLLAMA_BASE_URL)
            embedding_model: Embedding model name (default from config)
            chat_model: Generation model name (default from config)
            top_k: Chunks retrieved per question (default from config)
            language: Language the answers are written in (default from config)
            request_delay: Seconds between embedding requests during ingestion
        """
        self.store = store if store is not None else VectorStore()
        self.client = client or OllamaClient()
        self.embedding_model = embedding_model or config.EMBEDDING_MODEL
        self.chat_model = chat_model or config.CHAT_MODEL
        self.language = language or config.ANSWER_LANGUAGE

        self.pipeline = IngestPipeline(
            store=self.store,
            client=self.client,
            chunker=WordChunker(),
            embedding_model=self.embedding_model,
            request_delay=request_delay,
        )
        self.retriever = Retriever(
            store=self.store,
            client=self.client,
            embedding_model=self.embedding_model,
            top_k=top_k,
        )

    async def check_backend(self) -> None:
        """Check Ollama; raises BackendUnreachable when it is down."""
        await self.client.check_available()

    def load_index(self) -> bool:
        """Restore the persisted store, starting empty when there is none."""
        return self.store.load_or_empty()

    async def ingest_file(
        self, file_path: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> int:
        return await self.pipeline.ingest_file(file_path, progress_callback)

    def stats(self) -> Dict[str, Any]:
        return self.store.get_stats()

    def build_prompt(self, question: str, chunks: Sequence[Document]) -> str:
        return PROMPT_TEMPLATE.format(
            context=build_context(chunks),
            question=question,
            language=self.language,
        )

    async def answer(self, question: str, chunks: Sequence[Document]) -> str:
        """Generate an answer from the retrieved chunks.

        Returns NO_DOCUMENT_MESSAGE without calling the backend when the
        store is empty.

        Raises:
            GenerationFailure: If the generation call fails
        """
        if self.store.is_empty:
            return NO_DOCUMENT_MESSAGE

        prompt = self.build_prompt(question, chunks)

        return await self.client.generate(
            prompt,
            model=self.chat_model,
            temperature=config.GENERATION_TEMPERATURE,
            top_k=config.GENERATION_TOP_K,
            top_p=config.GENERATION_TOP_P,
        )

    async def chat(self, question: str, k: Optional[int] = None) -> ChatAnswer:
        """Retrieve context for a question and answer it.

        Raises:
            EmbeddingUnavailable: If the question cannot be embedded
            GenerationFailure: If the generation call fails
        """
        if self.store.is_empty:
            logger.info("chat_without_document")
            return ChatAnswer(answer=NO_DOCUMENT_MESSAGE)

        sources = await self.retriever.search(question, k)
        answer = await self.answer(question, sources)

        logger.info(
            "chat_answered",
            question_length=len(question),
            source_count=len(sources),
            answer_length=len(answer),
        )

        return ChatAnswer(answer=answer, sources=sources)
