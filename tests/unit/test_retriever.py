"""Tests for similarity-ranked retrieval."""
import pytest

from pdfchat.errors import EmbeddingUnavailable
from tests.conftest import make_document


@pytest.fixture
def five_chunk_store(store):
    store.replace_all([
        make_document("c0", [0.0, 1.0, 0.0], page=1),
        make_document("c1", [1.0, 0.0, 0.0], page=1),
        make_document("c2", [1.0, 1.0, 0.0], page=2),
        make_document("c3", [0.0, 0.0, 1.0], page=2),
        make_document("c4", [1.0, 0.2, 0.0], page=3),
    ])
    store.model_name = "fake-embed"
    return store


@pytest.mark.asyncio
async def test_k4_over_five_chunks_returns_four_best(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [1.0, 0.0, 0.0]

    results = await retriever.search_scored("question", k=4)

    assert [r.document.id for r in results] == ["c1", "c4", "c2", "c0"]
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_search_returns_documents(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [0.0, 0.0, 1.0]

    docs = await retriever.search("question", k=1)

    assert [doc.id for doc in docs] == ["c3"]


@pytest.mark.asyncio
async def test_k_larger_than_count_returns_all(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [1.0, 0.0, 0.0]

    results = await retriever.search("question", k=50)

    assert len(results) == 5
    assert {doc.id for doc in results} == {"c0", "c1", "c2", "c3", "c4"}


@pytest.mark.asyncio
async def test_default_k_comes_from_retriever(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [1.0, 0.0, 0.0]

    assert len(await retriever.search("question")) == 4


@pytest.mark.asyncio
async def test_query_uses_embedding_model(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [1.0, 0.0, 0.0]

    await retriever.search("question")

    assert fake_ollama.embed_calls == [{"model": "fake-embed", "input": "question"}]


@pytest.mark.asyncio
async def test_equal_scores_keep_insertion_order(retriever, store, fake_ollama):
    store.replace_all([make_document(f"d{i}", [1.0, 1.0]) for i in range(4)])
    fake_ollama.vectors["question"] = [2.0, 2.0]

    results = await retriever.search("question", k=3)

    assert [doc.id for doc in results] == ["d0", "d1", "d2"]


@pytest.mark.asyncio
async def test_dimension_mismatch_scores_zero(retriever, five_chunk_store, fake_ollama):
    fake_ollama.vectors["question"] = [1.0, 0.0]

    results = await retriever.search_scored("question", k=5)

    assert [r.score for r in results] == [0.0] * 5
    assert [r.document.id for r in results] == ["c0", "c1", "c2", "c3", "c4"]


@pytest.mark.asyncio
async def test_empty_store_returns_nothing_without_embedding(retriever, fake_ollama):
    assert await retriever.search("question") == []
    assert fake_ollama.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [0, -3])
async def test_non_positive_k_returns_nothing(retriever, five_chunk_store, fake_ollama, k):
    assert await retriever.search("question", k=k) == []
    assert fake_ollama.calls == []


@pytest.mark.asyncio
async def test_query_embedding_failure_propagates(retriever, five_chunk_store, fake_ollama):
    fake_ollama.embed_status = 500

    with pytest.raises(EmbeddingUnavailable):
        await retriever.search("question")
