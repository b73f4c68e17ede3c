"""Flat JSON vector store for a single ingested document.

Handles:
- Chunk records and the embedding model that produced them
- Wholesale replace and append with id/dimension invariants
- Whole-index persistence to one human-readable JSON file
- Statistics for display
"""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field, ValidationError

from pdfchat import config
from pdfchat.errors import (
    DimensionMismatch,
    DuplicateDocumentId,
    StoreCorrupt,
    StoreNotFound,
    StoreWriteError,
)

logger = structlog.get_logger()


class Document(BaseModel):
    """One embedded chunk of the source document."""

    id: str
    content: str = Field(min_length=1)
    page: int = Field(ge=1)
    vector: List[float]


class StoreSnapshot(BaseModel):
    """On-disk shape of the vector store."""

    documents: List[Document] = Field(default_factory=list)
    model_name: str = ""


class VectorStore:
    """In-memory list of embedded chunks persisted as a single JSON file."""

    def __init__(self, path: Path = None, model_name: str = ""):
        """Initialize an empty vector store.

        Args:
            path: Location of the persisted file (default config.STORE_PATH)
            model_name: Embedding model of the current contents
        """
        self.path = Path(path) if path is not None else config.STORE_PATH
        self.model_name = model_name
        self._documents: List[Document] = []
        self._ids = set()

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def documents(self) -> Tuple[Document, ...]:
        return tuple(self._documents)

    @property
    def is_empty(self) -> bool:
        return not self._documents

    @property
    def dimension(self) -> Optional[int]:
        """Vector length shared by every record, None while empty."""
        if not self._documents:
            return None
        return len(self._documents[0].vector)

    def append(self, document: Document) -> None:
        """Add one record.

        Raises:
            DuplicateDocumentId: If a record with the same id is stored
            DimensionMismatch: If the vector length differs from the stored ones
        """
        if document.id in self._ids:
            raise DuplicateDocumentId(f"Duplicate document id: {document.id}")

        dimension = self.dimension
        if dimension is not None and len(document.vector) != dimension:
            raise DimensionMismatch(
                f"Vector of {document.id} has {len(document.vector)} dimensions, "
                f"store holds {dimension}"
            )

        self._documents.append(document)
        self._ids.add(document.id)

    def replace_all(self, documents: Iterable[Document] = ()) -> None:
        """Discard the current contents and install a new document set."""
        previous = len(self._documents)
        self._documents = []
        self._ids = set()

        for document in documents:
            self.append(document)

        logger.info(
            "vector_store_replaced",
            previous_count=previous,
            document_count=len(self._documents),
        )

    def save(self) -> bytes:
        """Write the whole store to disk.

        The JSON is written to a temporary file next to the target and
        renamed into place.

        Returns:
            The serialized bytes

        Raises:
            StoreWriteError: If the file cannot be written
        """
        snapshot = StoreSnapshot(documents=self._documents, model_name=self.model_name)
        data = snapshot.model_dump_json(indent=2).encode("utf-8")

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("vector_store_save_failed", path=str(self.path), error=str(e))
            raise StoreWriteError(f"Failed to save vector store: {e}") from e

        logger.info(
            "vector_store_saved",
            path=str(self.path),
            document_count=len(self._documents),
            model_name=self.model_name,
            size_bytes=len(data),
        )

        return data

    def load(self) -> "VectorStore":
        """Replace the contents with the persisted store.

        Returns:
            self

        Raises:
            StoreNotFound: If nothing was saved at the configured path
            StoreCorrupt: If the file cannot be parsed into the expected shape
        """
        if not self.path.exists():
            raise StoreNotFound(f"Vector store not found: {self.path}")

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise StoreCorrupt(f"Cannot read vector store {self.path}: {e}") from e

        try:
            snapshot = StoreSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise StoreCorrupt(f"Invalid vector store {self.path}: {e}") from e

        try:
            self.replace_all(snapshot.documents)
        except (DuplicateDocumentId, DimensionMismatch) as e:
            self.replace_all()
            raise StoreCorrupt(f"Inconsistent vector store {self.path}: {e}") from e

        self.model_name = snapshot.model_name

        logger.info(
            "vector_store_loaded",
            path=str(self.path),
            document_count=len(self._documents),
            model_name=self.model_name,
        )

        return self

    def load_or_empty(self) -> bool:
        """Load the persisted store, falling back to an empty one.

        Returns:
            True if a store was loaded
        """
        try:
            self.load()
            return True
        except StoreNotFound:
            logger.info("no_vector_store_found", path=str(self.path))
        except StoreCorrupt as e:
            logger.warning("vector_store_corrupt", path=str(self.path), error=str(e))

        self.replace_all()
        self.model_name = ""
        return False

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the vector store.

        Returns:
            Dictionary with store statistics
        """
        total_chars = sum(len(doc.content) for doc in self._documents)
        count = len(self._documents)

        return {
            "document_count": count,
            "model_name": self.model_name,
            "page_count": len({doc.page for doc in self._documents}),
            "total_chars": total_chars,
            "avg_chunk_chars": total_chars / count if count else 0.0,
            "dimension": self.dimension,
            "store_path": str(self.path),
            "store_exists_on_disk": self.path.exists(),
        }
