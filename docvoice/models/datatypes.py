"""Core datatypes shared across Docvoice modules.

Responsibilities:
- Represent immutable records exchanged between discovery, planning, and execution.
- Describe pipeline stages, artifact kinds, and their declared dependencies.

Key types:
- `SourceDocument`, `ArtifactKind`, `PipelineStage`, `RunMode`, `RunPlan`,
  `StageState`, `StageOutcome`, `StageReport`, and `RunReport`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..errors import InvalidIdentifierError


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """A discovered source document.

    Attributes:
        path: Absolute path of the document.
        chapter_id: Stable identifier derived from the file name stem.
    """

    path: Path
    chapter_id: str

    @property
    def directory(self) -> Path:
        """Return the directory that holds document-side artifacts."""

        return self.path.parent


class ArtifactKind(str, Enum):
    """Derived files produced by pipeline stages."""

    TRANSCRIPT = "transcript"
    CONTENT_AUDIO = "content_audio"
    INTRO_TEXT = "intro_text"
    INTRO_AUDIO = "intro_audio"
    MERGED_AUDIO = "merged_audio"


class PipelineStage(str, Enum):
    """Pipeline stages in declared execution order."""

    TRANSCRIPT = "transcript"
    NARRATION = "narration"
    INTRO = "intro"
    MERGE = "merge"

    @property
    def outputs(self) -> tuple[ArtifactKind, ...]:
        """Return artifact kinds this stage produces."""

        return _STAGE_OUTPUTS[self]

    @property
    def dependencies(self) -> tuple[ArtifactKind, ...]:
        """Return artifact kinds that must exist before this stage may run."""

        return _STAGE_DEPENDENCIES[self]


_STAGE_OUTPUTS: dict[PipelineStage, tuple[ArtifactKind, ...]] = {
    PipelineStage.TRANSCRIPT: (ArtifactKind.TRANSCRIPT,),
    PipelineStage.NARRATION: (ArtifactKind.CONTENT_AUDIO,),
    PipelineStage.INTRO: (ArtifactKind.INTRO_TEXT, ArtifactKind.INTRO_AUDIO),
    PipelineStage.MERGE: (ArtifactKind.MERGED_AUDIO,),
}

_STAGE_DEPENDENCIES: dict[PipelineStage, tuple[ArtifactKind, ...]] = {
    PipelineStage.TRANSCRIPT: (),
    PipelineStage.NARRATION: (ArtifactKind.TRANSCRIPT,),
    PipelineStage.INTRO: (),
    PipelineStage.MERGE: (ArtifactKind.INTRO_AUDIO, ArtifactKind.CONTENT_AUDIO),
}


class RunMode(str, Enum):
    """Operator-selected scope of work for one invocation."""

    TRANSCRIPTS_ONLY = "transcripts-only"
    AUDIO_ONLY = "audio-only"
    INTROS_ONLY = "intros-only"
    MERGE_ONLY = "merge-only"
    FULL = "full"
    SINGLE_DOCUMENT = "single-document"

    @property
    def stages(self) -> tuple[PipelineStage, ...]:
        """Return the ordered stages executed in this mode."""

        return _MODE_STAGES[self]

    @property
    def requires_single_document(self) -> bool:
        """Return whether the mode targets exactly one operator-selected document."""

        return self is RunMode.SINGLE_DOCUMENT


_MODE_STAGES: dict[RunMode, tuple[PipelineStage, ...]] = {
    RunMode.TRANSCRIPTS_ONLY: (PipelineStage.TRANSCRIPT,),
    RunMode.AUDIO_ONLY: (PipelineStage.NARRATION,),
    RunMode.INTROS_ONLY: (PipelineStage.INTRO,),
    RunMode.MERGE_ONLY: (PipelineStage.MERGE,),
    RunMode.FULL: tuple(PipelineStage),
    RunMode.SINGLE_DOCUMENT: tuple(PipelineStage),
}


@dataclass(frozen=True, slots=True)
class RunPlan:
    """Immutable selection of documents and stages for one invocation.

    Attributes:
        documents: Ordered documents to process.
        stages: Ordered stages to execute across all documents.
        output_dir: Directory that receives audio artifacts.
        mode: Run mode the plan was built from.
    """

    documents: tuple[SourceDocument, ...]
    stages: tuple[PipelineStage, ...]
    output_dir: Path
    mode: RunMode = RunMode.FULL

    @classmethod
    def build(
        cls,
        *,
        documents: list[SourceDocument] | tuple[SourceDocument, ...],
        mode: RunMode,
        output_dir: Path,
        selected: SourceDocument | None = None,
    ) -> RunPlan:
        """Build a validated plan from discovered documents and an operator selection."""

        if mode.requires_single_document and selected is None:
            raise ValueError("Single-document mode requires a selected document.")

        chosen = (selected,) if selected is not None else tuple(documents)
        seen: dict[str, Path] = {}
        for document in chosen:
            previous = seen.get(document.chapter_id)
            if previous is not None:
                raise InvalidIdentifierError(
                    f"Chapter id `{document.chapter_id}` is shared by `{previous}` and "
                    f"`{document.path}`.",
                    hint="Rename one of the documents so every file stem is unique.",
                )
            seen[document.chapter_id] = document.path

        ordered_stages = tuple(stage for stage in PipelineStage if stage in mode.stages)
        return cls(
            documents=chosen,
            stages=ordered_stages,
            output_dir=output_dir,
            mode=mode,
        )

    @property
    def includes_transcripts(self) -> bool:
        """Return whether transcript generation is part of this plan."""

        return PipelineStage.TRANSCRIPT in self.stages


class StageState(str, Enum):
    """Lifecycle of one (document, stage) pair."""

    PENDING = "pending"
    SKIPPED = "skipped"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StageOutcome:
    """Terminal state of one (document, stage) pair.

    Attributes:
        chapter_id: Chapter identifier of the document.
        stage: Stage that was evaluated.
        state: Final state reached in this run.
        elapsed_seconds: Wall-clock time spent on this pair.
        detail: Optional human-readable note (missing dependencies, failure text).
    """

    chapter_id: str
    stage: PipelineStage
    state: StageState
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class StageReport:
    """Aggregated counters and timing for one stage phase."""

    stage: PipelineStage
    elapsed_seconds: float = 0.0
    processed: int = 0
    skipped: int = 0
    pending: int = 0


@dataclass(slots=True)
class RunReport:
    """Per-run outcome and timing summary, accumulated by the orchestrator."""

    outcomes: list[StageOutcome] = field(default_factory=list)
    stages: dict[PipelineStage, StageReport] = field(default_factory=dict)
    document_seconds: dict[str, float] = field(default_factory=dict)
    total_seconds: float = 0.0

    def record(self, outcome: StageOutcome) -> None:
        """Add one terminal outcome and update stage counters."""

        self.outcomes.append(outcome)
        report = self.stages.setdefault(outcome.stage, StageReport(stage=outcome.stage))
        if outcome.state is StageState.DONE:
            report.processed += 1
        elif outcome.state is StageState.SKIPPED:
            report.skipped += 1
        elif outcome.state is StageState.PENDING:
            report.pending += 1
        self.document_seconds[outcome.chapter_id] = (
            self.document_seconds.get(outcome.chapter_id, 0.0) + outcome.elapsed_seconds
        )

    def states_for(self, stage: PipelineStage) -> list[StageState]:
        """Return recorded states for one stage in processing order."""

        return [outcome.state for outcome in self.outcomes if outcome.stage is stage]

    @property
    def processed_count(self) -> int:
        """Return total number of executed (document, stage) pairs."""

        return sum(report.processed for report in self.stages.values())

    @property
    def skipped_count(self) -> int:
        """Return total number of skipped (document, stage) pairs."""

        return sum(report.skipped for report in self.stages.values())

    @property
    def pending_count(self) -> int:
        """Return total number of pairs left pending on missing dependencies."""

        return sum(report.pending for report in self.stages.values())
