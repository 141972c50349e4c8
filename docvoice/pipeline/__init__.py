"""Docvoice pipeline package.

This package contains chapter identity resolution, artifact location, the
truncation policy, stage executors, and the orchestrator that sequences them.
"""

from .artifacts import ArtifactLocation, ArtifactLocator
from .identity import resolve_chapter_id
from .orchestrator import DocvoicePipeline
from .truncation import truncate_document_text

__all__ = [
    "ArtifactLocation",
    "ArtifactLocator",
    "DocvoicePipeline",
    "resolve_chapter_id",
    "truncate_document_text",
]
