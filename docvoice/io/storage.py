"""Artifact file persistence helpers.

Responsibilities:
- Read document and transcript text as UTF-8.
- Write text and audio artifacts through a temporary sibling and an atomic
  replace, so an interrupted write never leaves a file that looks complete.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import ArtifactIOError


def load_text(path: Path, *, stage: str = "io") -> str:
    """Load UTF-8 text from disk."""

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactIOError(f"Failed to read `{path}`: {exc}", stage=stage) from exc


def save_text(path: Path, content: str, *, stage: str = "io") -> Path:
    """Save text content and return the final path."""

    return save_bytes(path, content.encode("utf-8"), stage=stage)


def save_bytes(path: Path, data: bytes, *, stage: str = "io") -> Path:
    """Save raw bytes (audio payloads) and return the final path."""

    tmp_path = path.with_name(f"{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        raise ArtifactIOError(f"Failed to write `{path}`: {exc}", stage=stage) from exc
    return path
