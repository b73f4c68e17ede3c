"""Shared fixtures: a fake Ollama backend served through httpx.MockTransport."""
import hashlib
import json
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest

from pdfchat.chatbot import RAGChatbot
from pdfchat.llm_client import OllamaClient
from pdfchat.rag.chunker import WordChunker
from pdfchat.rag.ingest import IngestPipeline
from pdfchat.rag.retriever import Retriever
from pdfchat.rag.store import Document, VectorStore

BASE_URL = "http://ollama.test"
EMBED_MODEL = "fake-embed"
CHAT_MODEL = "fake-chat"


class FakeOllama:
    """In-process stand-in for the Ollama HTTP API."""

    def __init__(self, dimension: int = 8):
        self.dimension = dimension
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.vectors: Dict[str, List[float]] = {}
        self.fail_tokens: Set[str] = set()
        self.embed_status = 200
        self.embed_body: Optional[Dict[str, Any]] = None
        self.generate_status = 200
        self.generate_body: Dict[str, Any] = {"response": "Fake answer", "done": True}
        self.tags_status = 200
        self.models = [{"name": "fake-embed:latest"}, {"name": "fake-chat:latest"}]

    def vector_for(self, text: str) -> List[float]:
        if text in self.vectors:
            return self.vectors[text]
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 for b in digest[: self.dimension]]

    @property
    def embed_calls(self) -> List[Dict[str, Any]]:
        return [payload for path, payload in self.calls if path == "/api/embed"]

    @property
    def generate_calls(self) -> List[Dict[str, Any]]:
        return [payload for path, payload in self.calls if path == "/api/generate"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path == "/api/tags":
            self.calls.append((path, {}))
            return httpx.Response(self.tags_status, json={"models": self.models})

        payload = json.loads(request.content)
        self.calls.append((path, payload))

        if path == "/api/embed":
            if self.embed_status != 200:
                return httpx.Response(self.embed_status, json={"error": "embed failed"})
            if self.fail_tokens & set(payload["input"].split()):
                return httpx.Response(500, json={"error": "model crashed"})
            if self.embed_body is not None:
                return httpx.Response(200, json=self.embed_body)
            return httpx.Response(
                200,
                json={"model": payload["model"], "embeddings": [self.vector_for(payload["input"])]},
            )

        if path == "/api/generate":
            return httpx.Response(self.generate_status, json=self.generate_body)

        return httpx.Response(404, json={"error": "not found"})


def make_document(doc_id: str, vector: List[float], page: int = 1, content: str = None) -> Document:
    return Document(
        id=doc_id,
        content=content or f"content of {doc_id}",
        page=page,
        vector=vector,
    )


def words(count: int, prefix: str = "w") -> str:
    """Text made of ``count`` distinct numbered words."""
    return " ".join(f"{prefix}{i}" for i in range(count))


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def client(fake_ollama: FakeOllama) -> OllamaClient:
    return OllamaClient(base_url=BASE_URL, transport=httpx.MockTransport(fake_ollama.handler))


@pytest.fixture
def store(tmp_path) -> VectorStore:
    return VectorStore(path=tmp_path / "vectorstore.json")


@pytest.fixture
def pipeline(store: VectorStore, client: OllamaClient) -> IngestPipeline:
    return IngestPipeline(
        store=store,
        client=client,
        chunker=WordChunker(chunk_size=300, chunk_overlap=50),
        embedding_model=EMBED_MODEL,
        request_delay=0,
    )


@pytest.fixture
def retriever(store: VectorStore, client: OllamaClient) -> Retriever:
    return Retriever(store=store, client=client, embedding_model=EMBED_MODEL, top_k=4)


@pytest.fixture
def chatbot(store: VectorStore, client: OllamaClient) -> RAGChatbot:
    return RAGChatbot(
        store=store,
        client=client,
        embedding_model=EMBED_MODEL,
        chat_model=CHAT_MODEL,
        top_k=4,
        language="Italian",
        request_delay=0,
    )
