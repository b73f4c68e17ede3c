"""Cosine similarity scoring and ranking."""
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from pdfchat.rag.store import Document


@dataclass
class ScoredDocument:
    """A stored chunk paired with its similarity to a query."""

    document: Document
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Vectors of different length, empty vectors and zero vectors score 0.0
    so they rank last instead of raising.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def rank_by_similarity(
    query_vector: Sequence[float], documents: Iterable[Document]
) -> List[ScoredDocument]:
    """Score every document against the query, best first.

    The sort is stable: documents with equal scores keep their stored order.
    """
    scored = [
        ScoredDocument(document=doc, score=cosine_similarity(query_vector, doc.vector))
        for doc in documents
    ]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored
