"""Tests for cosine similarity and ranking."""
import pytest

from pdfchat.rag.similarity import cosine_similarity, rank_by_similarity
from tests.conftest import make_document


@pytest.mark.parametrize(
    "vector",
    [[1.0, 2.0, 3.0], [0.5], [-3.0, 4.0], [1e-8, 2e-8], [123.0, -0.001, 7.5, 0.0]],
)
def test_self_similarity_is_one(vector):
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_length_mismatch_scores_zero():
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0], [0.0]) == 0.0


def test_empty_vectors_score_zero():
    assert cosine_similarity([], []) == 0.0


def test_orthogonal_and_opposite():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_known_value():
    assert cosine_similarity([1.0, 1.0], [1.0, 0.0]) == pytest.approx(2 ** -0.5)


@pytest.mark.parametrize(
    "a,b",
    [
        ([1.0, 2.0, 3.0], [4.0, -5.0, 6.0]),
        ([0.1, 0.2], [0.3, 0.9]),
        ([1.0, 0.0], [1.0, 2.0, 3.0]),
        ([0.0, 0.0], [1.0, 1.0]),
    ],
)
def test_similarity_is_symmetric(a, b):
    assert cosine_similarity(a, b) == cosine_similarity(b, a)


def test_result_is_bounded():
    score = cosine_similarity([0.1, 0.2, 0.3], [0.1, 0.2, 0.3])
    assert -1.0 <= score <= 1.0


def test_ranking_is_descending():
    docs = [
        make_document("low", [0.0, 1.0]),
        make_document("high", [1.0, 0.0]),
        make_document("mid", [1.0, 1.0]),
    ]

    ranked = rank_by_similarity([1.0, 0.0], docs)

    assert [r.document.id for r in ranked] == ["high", "mid", "low"]
    assert ranked[0].score == pytest.approx(1.0)


def test_ties_keep_insertion_order():
    docs = [
        make_document("a", [0.0, 0.0]),
        make_document("b", [2.0, 0.0]),
        make_document("c", [0.0, 0.0]),
        make_document("d", [1.0, 0.0]),
        make_document("e", [1.0, 2.0, 3.0]),
    ]

    ranked = rank_by_similarity([1.0, 0.0], docs)

    assert [r.document.id for r in ranked] == ["b", "d", "a", "c", "e"]
    assert [r.score for r in ranked][2:] == [0.0, 0.0, 0.0]
