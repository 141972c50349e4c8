"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level runtime logs through `loguru`.
- Keep document payloads and API keys out of log lines.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Reduce a context value to a token without spaces or quotes."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ",", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Render context as ` key=value` pairs sorted by key."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit one line per pipeline event so runs can be followed and grepped."""

    def __init__(self, sink: TextIO | None = None) -> None:
        """Route loguru output to `sink` with a bare message format."""

        self._sink = sink or sys.stdout
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level="INFO", colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Write one `[phase]` line at the given loguru level."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, documents: int) -> None:
        """Log that a stage phase is starting over `documents` documents."""

        self._emit("INFO", "start", stage, documents=documents)

    def log_stage_complete(self, stage: str, elapsed_seconds: float) -> None:
        """Emit a stage-complete runtime event with phase timing."""

        self._emit("INFO", "complete", stage, elapsed=f"{elapsed_seconds:.3f}s")

    def log_stage_failure(self, stage: str, chapter_id: str, error_type: str) -> None:
        """Log the failing chapter and exception type, never the payload."""

        self._emit("ERROR", "failure", stage, chapter=chapter_id, error_type=error_type)

    def log_document_done(self, stage: str, chapter_id: str, elapsed_seconds: float) -> None:
        """Emit a per-document completion event."""

        self._emit("INFO", "done", stage, chapter=chapter_id, elapsed=f"{elapsed_seconds:.3f}s")

    def log_document_skipped(self, stage: str, chapter_id: str) -> None:
        """Emit an event for a document whose stage outputs already exist."""

        self._emit("INFO", "skipped", stage, chapter=chapter_id)

    def log_document_pending(self, stage: str, chapter_id: str, missing: tuple[str, ...]) -> None:
        """Emit a warning for a document left pending on missing upstream artifacts."""

        self._emit("WARNING", "pending", stage, chapter=chapter_id, missing=",".join(missing))

    def log_truncation(self, chapter_id: str, original_length: int, limit: int) -> None:
        """Emit a warning when document text is truncated before transcript generation."""

        self._emit(
            "WARNING",
            "truncated",
            "transcript",
            chapter=chapter_id,
            chars=original_length,
            limit=limit,
        )

    def log_run_complete(self, elapsed_seconds: float, documents: int) -> None:
        """Emit the grand total for one run."""

        self._emit("INFO", "complete", "run", documents=documents, elapsed=f"{elapsed_seconds:.3f}s")
