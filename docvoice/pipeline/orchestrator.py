"""Pipeline orchestration for Docvoice.

Responsibilities:
- Run the selected stages over the planned documents in declared order.
- Skip (document, stage) pairs whose artifacts already exist.
- Leave pairs with missing upstream artifacts pending instead of failing.
- Abort the whole run on the first stage failure.
- Accumulate per-stage, per-document, and total timing into a `RunReport`.

Key types:
- `DocvoicePipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import time

from ..audio.concatenator import AudioConcatenator
from ..errors import ArtifactIOError, DependencyMissingError, PipelineStageError
from ..llm.transcript import TranscriptProvider
from ..models.datatypes import (
    ArtifactKind,
    PipelineStage,
    RunPlan,
    RunReport,
    SourceDocument,
    StageOutcome,
    StageReport,
    StageState,
)
from ..telemetry.logger import RunLogger
from ..tts.narrator import NarrationProvider
from .artifacts import ArtifactLocator
from .executors import IntroExecutor, MergeExecutor, NarrationExecutor, TranscriptExecutor
from .telemetry import PipelineTelemetryMixin
from .truncation import DEFAULT_MAX_DOCUMENT_CHARS

_Executor = TranscriptExecutor | NarrationExecutor | IntroExecutor | MergeExecutor


class DocvoicePipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single Docvoice run."""

    def __init__(
        self,
        transcript_provider: TranscriptProvider | None = None,
        narrator: NarrationProvider | None = None,
        concatenator: AudioConcatenator | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS,
    ) -> None:
        """Initialize collaborators and optional logging/progress hooks.

        Collaborators may be omitted when the planned stages never need them; a
        stage that must execute without its collaborator fails with a `config`
        stage error.
        """

        self._transcript_provider = transcript_provider
        self._narrator = narrator
        self._concatenator = concatenator
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._max_document_chars = max_document_chars
        self._executors: dict[PipelineStage, _Executor] = {}
        self.last_report: RunReport | None = None

    def run(self, plan: RunPlan) -> RunReport:
        """Execute a run plan and return its report.

        Raises:
            PipelineStageError: On the first failed stage execution; the partially
                filled report stays available as `last_report`.
        """

        report = RunReport()
        self.last_report = report
        run_started = time.perf_counter()
        locator = ArtifactLocator(plan.output_dir)
        self._prepare_output_dir(locator.output_dir)

        stage_total = len(plan.stages)
        for position, stage in enumerate(plan.stages, start=1):
            self._run_stage(stage, position, stage_total, plan, locator, report)

        report.total_seconds = time.perf_counter() - run_started
        self._on_run_complete(report.total_seconds, len(plan.documents))
        return report

    def _prepare_output_dir(self, output_dir: Path) -> None:
        """Create the shared output directory once, before any document."""

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to create output directory `{output_dir}`: {exc}",
                stage="setup",
            ) from exc

    def _run_stage(
        self,
        stage: PipelineStage,
        position: int,
        stage_total: int,
        plan: RunPlan,
        locator: ArtifactLocator,
        report: RunReport,
    ) -> None:
        """Run one stage phase across every planned document."""

        self._on_stage_start(stage, position, stage_total, len(plan.documents))
        stage_report = report.stages.setdefault(stage, StageReport(stage=stage))
        phase_started = time.perf_counter()
        try:
            for document in plan.documents:
                self._process_document(stage, document, locator, report)
        finally:
            stage_report.elapsed_seconds = time.perf_counter() - phase_started
        self._on_stage_complete(stage, stage_report.elapsed_seconds)

    def _process_document(
        self,
        stage: PipelineStage,
        document: SourceDocument,
        locator: ArtifactLocator,
        report: RunReport,
    ) -> StageState:
        """Advance one (document, stage) pair to a terminal state."""

        chapter_id = document.chapter_id
        started = time.perf_counter()

        if locator.outputs_complete(document, stage):
            report.record(StageOutcome(chapter_id, stage, StageState.SKIPPED))
            self._on_document_skipped(stage, chapter_id)
            return StageState.SKIPPED

        missing = locator.missing_dependencies(document, stage)
        if missing:
            return self._record_pending(stage, chapter_id, tuple(kind.value for kind in missing), report)

        executor = self._executor(stage)
        try:
            self._execute(stage, executor, document, locator)
        except DependencyMissingError as exc:
            return self._record_pending(stage, chapter_id, exc.missing, report)
        except Exception as exc:
            error = exc if isinstance(exc, PipelineStageError) else self._stage_error(stage, exc)
            error.stage = stage.value
            error.chapter_id = chapter_id
            elapsed = time.perf_counter() - started
            report.record(
                StageOutcome(chapter_id, stage, StageState.FAILED, elapsed, detail=error.detail)
            )
            self._on_stage_failure(stage, chapter_id, exc)
            if error is exc:
                raise
            raise error from exc

        elapsed = time.perf_counter() - started
        report.record(StageOutcome(chapter_id, stage, StageState.DONE, elapsed))
        self._on_document_done(stage, chapter_id, elapsed)
        return StageState.DONE

    @staticmethod
    def _stage_error(stage: PipelineStage, exc: Exception) -> PipelineStageError:
        """Map an unexpected collaborator exception to a stage-scoped error."""

        if isinstance(exc, OSError):
            return ArtifactIOError(f"Filesystem error: {exc}", stage=stage.value)
        return PipelineStageError(
            stage=stage.value,
            detail=f"{type(exc).__name__}: {exc}",
        )

    def _record_pending(
        self,
        stage: PipelineStage,
        chapter_id: str,
        missing: tuple[str, ...],
        report: RunReport,
    ) -> StageState:
        """Record a pair left pending because upstream artifacts are absent."""

        report.record(
            StageOutcome(
                chapter_id,
                stage,
                StageState.PENDING,
                detail="missing " + ", ".join(missing),
            )
        )
        self._on_document_pending(stage, chapter_id, missing)
        return StageState.PENDING

    def _execute(
        self,
        stage: PipelineStage,
        executor: _Executor,
        document: SourceDocument,
        locator: ArtifactLocator,
    ) -> None:
        """Invoke the stage executor with artifact paths resolved by the locator."""

        if isinstance(executor, TranscriptExecutor):
            transcript = locator.locate_for(document, ArtifactKind.TRANSCRIPT)
            executor.execute(document, transcript.path)
        elif isinstance(executor, NarrationExecutor):
            transcript = locator.locate_for(document, ArtifactKind.TRANSCRIPT)
            audio = locator.locate_for(document, ArtifactKind.CONTENT_AUDIO)
            executor.execute(transcript.path, audio.path)
        elif isinstance(executor, IntroExecutor):
            # Only the missing half runs; an existing script is never rewritten.
            script = locator.locate_for(document, ArtifactKind.INTRO_TEXT)
            audio = locator.locate_for(document, ArtifactKind.INTRO_AUDIO)
            if not script.exists and not audio.exists:
                executor.execute(document.chapter_id, script.path, audio.path)
            elif not script.exists:
                executor.write_script(document.chapter_id, script.path)
            else:
                executor.narrate(script.path, audio.path)
        else:
            intro_audio = locator.locate_for(document, ArtifactKind.INTRO_AUDIO)
            content_audio = locator.locate_for(document, ArtifactKind.CONTENT_AUDIO)
            merged = locator.locate_for(document, ArtifactKind.MERGED_AUDIO)
            executor.execute(intro_audio.path, content_audio.path, merged.path)

    def _executor(self, stage: PipelineStage) -> _Executor:
        """Return the cached executor for a stage, building it on first use."""

        cached = self._executors.get(stage)
        if cached is not None:
            return cached

        executor: _Executor
        if stage is PipelineStage.TRANSCRIPT:
            executor = TranscriptExecutor(
                self._require(self._transcript_provider, stage, "transcript provider"),
                max_document_chars=self._max_document_chars,
                run_logger=self._run_logger,
            )
        elif stage is PipelineStage.NARRATION:
            executor = NarrationExecutor(self._require(self._narrator, stage, "narration provider"))
        elif stage is PipelineStage.INTRO:
            executor = IntroExecutor(self._require(self._narrator, stage, "narration provider"))
        else:
            executor = MergeExecutor(
                self._require(self._concatenator, stage, "audio concatenator")
            )
        self._executors[stage] = executor
        return executor

    @staticmethod
    def _require(collaborator: object | None, stage: PipelineStage, label: str):
        """Return a configured collaborator or raise a config error."""

        if collaborator is None:
            raise PipelineStageError(
                stage="config",
                detail=f"Stage `{stage.value}` needs a {label}, but none is configured.",
                hint="Check the run mode and provider settings, then rerun.",
            )
        return collaborator
