"""Exception hierarchy for the pdfchat pipeline."""


class PdfChatError(Exception):
    """Base class for all pdfchat errors."""


class ExtractionFailure(PdfChatError):
    """The source document could not be read or parsed."""


class SourceTooShort(ExtractionFailure):
    """The extracted text is too short to be worth indexing."""


class EmbeddingUnavailable(PdfChatError):
    """The embedding backend failed or returned an unusable payload."""


class GenerationFailure(PdfChatError):
    """The generation backend failed or returned an unusable payload."""


class BackendUnreachable(PdfChatError):
    """The Ollama service is unreachable or its model list is unreadable."""


class StoreError(PdfChatError):
    """Base class for vector store persistence errors."""


class StoreNotFound(StoreError):
    """No persisted vector store exists at the configured path."""


class StoreCorrupt(StoreError):
    """The persisted vector store cannot be parsed into the expected shape."""


class StoreWriteError(StoreError):
    """The vector store could not be written to disk."""


class IndexIntegrityError(PdfChatError):
    """A record would break an invariant of the vector store."""


class DuplicateDocumentId(IndexIntegrityError):
    """Two records share the same id."""


class DimensionMismatch(IndexIntegrityError):
    """A vector's length differs from the vectors already stored."""
