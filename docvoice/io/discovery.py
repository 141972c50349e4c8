"""Source document discovery and reading.

Responsibilities:
- Walk a documentation tree recursively and collect source documents.
- Read raw document text for the transcript stage.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import PipelineStageError
from ..models.datatypes import SourceDocument
from ..pipeline.identity import resolve_chapter_id
from .storage import load_text

DEFAULT_DOCUMENT_EXTENSIONS: tuple[str, ...] = (".md",)


def discover_documents(
    root: Path,
    extensions: tuple[str, ...] = DEFAULT_DOCUMENT_EXTENSIONS,
) -> list[SourceDocument]:
    """Return source documents under `root`, sorted by path.

    Directory symlinks are followed, and each real directory is walked once so
    symlink cycles and aliases yield every document a single time. Hidden files
    and unreadable directories are ignored. Generated transcripts
    (`*.conversation.txt`) and intro scripts (`intro_*.txt`) never count as
    sources even when `.txt` is a configured extension.
    """

    if not root.is_dir():
        raise PipelineStageError(
            stage="discover",
            detail=f"Documents directory not found: `{root}`.",
            hint="Pass an existing directory via `--docs` or set `DOCS_PATH`.",
        )

    normalized_extensions = {extension.lower() for extension in extensions}
    found: set[Path] = set()
    visited: set[Path] = set()
    for directory, dir_names, file_names in os.walk(root, followlinks=True):
        real_directory = Path(directory).resolve()
        if real_directory in visited:
            dir_names[:] = []
            continue
        visited.add(real_directory)
        for file_name in file_names:
            if file_name.startswith(".") or _is_generated_artifact(file_name):
                continue
            candidate = Path(directory) / file_name
            if candidate.suffix.lower() in normalized_extensions:
                found.add(candidate.resolve())

    return [
        SourceDocument(path=path, chapter_id=resolve_chapter_id(path))
        for path in sorted(found)
    ]


def _is_generated_artifact(file_name: str) -> bool:
    """Return whether a file name matches a pipeline-written text artifact."""

    lowered = file_name.lower()
    if lowered.endswith(".conversation.txt"):
        return True
    return lowered.startswith("intro_") and lowered.endswith(".txt")


def read_document_text(document: SourceDocument) -> str:
    """Read the raw text of one source document."""

    return load_text(document.path, stage="transcript")


def find_document(documents: list[SourceDocument], selector: Path | str) -> SourceDocument:
    """Pick one discovered document by path or chapter id."""

    selector_text = str(selector).strip()
    selector_path = Path(selector_text).resolve()
    for document in documents:
        if document.path == selector_path or document.chapter_id == selector_text:
            return document
    raise PipelineStageError(
        stage="discover",
        detail=f"Document `{selector_text}` is not among the discovered documents.",
        hint="Run `docvoice list-documents` to see available documents.",
    )
