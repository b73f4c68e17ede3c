"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- PDF and text extraction with cleanup
- Word-window chunking with overlap
- Cosine similarity ranking
- JSON vector storage
- Ingestion and semantic retrieval
"""
