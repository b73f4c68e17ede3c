"""Retriever for semantic search over the indexed document.

Handles:
- Query embedding generation
- Exhaustive cosine scoring of every stored chunk
- Stable top-K ranking
"""
from typing import List, Optional
import structlog

from pdfchat import config
from pdfchat.llm_client import OllamaClient
from pdfchat.rag.similarity import ScoredDocument, rank_by_similarity
from pdfchat.rag.store import Document, VectorStore

logger = structlog.get_logger()


class Retriever:
    """Semantic retriever for RAG pipeline."""

    def __init__(
        self,
        store: VectorStore,
        client: OllamaClient,
        embedding_model: str = None,
        top_k: int = None,
    ):
        """Initialize the retriever.

        Args:
            store: Vector store to search
            client: Ollama client used to embed queries
            embedding_model: Embedding model name (default from config)
            top_k: Number of results to retrieve (default from config)
        """
        self.store = store
        self.client = client
        self.embedding_model = embedding_model or config.EMBEDDING_MODEL
        self.top_k = config.RETRIEVAL_TOP_K if top_k is None else top_k

    async def search_scored(
        self, query: str, k: Optional[int] = None
    ) -> List[ScoredDocument]:
        """Retrieve the chunks most similar to a query, with their scores.

        Args:
            query: User query text
            k: Number of results to return (overrides default)

        Returns:
            At most k results sorted by descending similarity; equal scores
            keep insertion order

        Raises:
            EmbeddingUnavailable: If the query cannot be embedded
        """
        k = self.top_k if k is None else k

        if k <= 0 or self.store.is_empty:
            logger.info("retrieval_skipped", k=k, document_count=len(self.store))
            return []

        query_vector = await self.client.embed(query, model=self.embedding_model)

        dimension = self.store.dimension
        if dimension is not None and len(query_vector) != dimension:
            logger.warning(
                "query_dimension_mismatch",
                query_dimension=len(query_vector),
                store_dimension=dimension,
                query_model=self.embedding_model,
                store_model=self.store.model_name,
            )

        ranked = rank_by_similarity(query_vector, self.store.documents)
        results = ranked[:k]

        logger.info(
            "retrieval_completed",
            query_length=len(query),
            results_returned=len(results),
            top_score=results[0].score if results else None,
        )

        return results

    async def search(self, query: str, k: Optional[int] = None) -> List[Document]:
        """Retrieve the chunks most similar to a query, best first."""
        return [result.document for result in await self.search_scored(query, k)]
