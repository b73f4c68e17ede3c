"""Offline chatbot that answers questions about a single PDF or text document."""

__version__ = "0.1.0"
