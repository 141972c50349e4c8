"""Input/output components for Docvoice.

This package contains document discovery and artifact persistence helpers
used by the pipeline.
"""

from .discovery import discover_documents, find_document, read_document_text
from .storage import load_text, save_bytes, save_text

__all__ = [
    "discover_documents",
    "find_document",
    "load_text",
    "read_document_text",
    "save_bytes",
    "save_text",
]
