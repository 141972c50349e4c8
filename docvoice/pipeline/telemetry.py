"""Stage telemetry helper methods for the Docvoice pipeline.

Responsibilities:
- Provide stage index/total metadata for progress reporting.
- Emit stage start/complete/failure and per-document events.
"""

from __future__ import annotations

from collections.abc import Callable

from ..models.datatypes import PipelineStage
from ..telemetry.logger import RunLogger


class PipelineTelemetryMixin:
    """Provide stage-telemetry helper methods."""

    _run_logger: RunLogger | None
    _stage_progress_callback: Callable[[str, int, int], None] | None

    def _on_stage_start(
        self, stage: PipelineStage, position: int, total: int, documents: int
    ) -> None:
        """Emit start events to the progress callback and structured logger."""

        if self._stage_progress_callback is not None:
            self._stage_progress_callback(stage.value, position, total)
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage.value, documents)

    def _on_stage_complete(self, stage: PipelineStage, elapsed_seconds: float) -> None:
        """Emit stage-complete event with phase timing."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage.value, elapsed_seconds)

    def _on_stage_failure(self, stage: PipelineStage, chapter_id: str, exc: Exception) -> None:
        """Emit stage-failure event with sanitized exception metadata."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage.value, chapter_id, type(exc).__name__)

    def _on_document_done(self, stage: PipelineStage, chapter_id: str, elapsed: float) -> None:
        if self._run_logger is not None:
            self._run_logger.log_document_done(stage.value, chapter_id, elapsed)

    def _on_document_skipped(self, stage: PipelineStage, chapter_id: str) -> None:
        if self._run_logger is not None:
            self._run_logger.log_document_skipped(stage.value, chapter_id)

    def _on_document_pending(
        self, stage: PipelineStage, chapter_id: str, missing: tuple[str, ...]
    ) -> None:
        if self._run_logger is not None:
            self._run_logger.log_document_pending(stage.value, chapter_id, missing)

    def _on_run_complete(self, elapsed_seconds: float, documents: int) -> None:
        if self._run_logger is not None:
            self._run_logger.log_run_complete(elapsed_seconds, documents)
