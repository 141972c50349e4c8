"""Chapter identity resolution for source documents."""

from __future__ import annotations

from pathlib import Path

from ..errors import InvalidIdentifierError


def resolve_chapter_id(path: Path | str) -> str:
    """Return the file-name stem of a document path as its chapter identifier.

    Raises:
        InvalidIdentifierError: If the path has no usable stem, for example an
            empty path, a path ending in a separator, or a hidden dot-file.
    """

    raw = str(path)
    if not raw.strip() or raw.endswith(("/", "\\")):
        raise InvalidIdentifierError(f"Document path `{raw}` has no file name.")

    stem = Path(raw).stem.strip()
    if not stem or stem.startswith("."):
        raise InvalidIdentifierError(
            f"Document path `{raw}` yields no usable chapter identifier.",
            hint="Give the document a non-hidden file name such as `intro.md`.",
        )
    return stem
