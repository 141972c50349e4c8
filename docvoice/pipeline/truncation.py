"""Content truncation policy applied before transcript generation."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_DOCUMENT_CHARS = 4000


@dataclass(frozen=True, slots=True)
class TruncationResult:
    """Document text prepared for the transcript provider.

    Attributes:
        text: Text to send, at most `limit` characters long.
        original_length: Character count of the document before truncation.
        truncated: Whether characters were dropped.
    """

    text: str
    original_length: int
    truncated: bool


def truncate_document_text(
    text: str, limit: int = DEFAULT_MAX_DOCUMENT_CHARS
) -> TruncationResult:
    """Cap document text to the first `limit` characters (code points, not bytes)."""

    if limit <= 0:
        raise ValueError("Truncation limit must be a positive integer.")

    original_length = len(text)
    if original_length <= limit:
        return TruncationResult(text=text, original_length=original_length, truncated=False)
    return TruncationResult(
        text=text[:limit],
        original_length=original_length,
        truncated=True,
    )
