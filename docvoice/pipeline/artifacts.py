"""Artifact path computation and existence checks.

Responsibilities:
- Map `(chapter_id, ArtifactKind)` to one canonical filesystem path.
- Report whether artifacts exist, re-checking the filesystem on every call.
- Answer stage-level questions (all outputs present, which dependencies are missing).

Filesystem existence is the only record of completed work. Keeping that rule
inside this module lets a different completion check replace it without
touching executors or the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import ArtifactIOError
from ..models.datatypes import ArtifactKind, PipelineStage, SourceDocument

_DOCUMENT_SIDE_KINDS = frozenset({ArtifactKind.TRANSCRIPT, ArtifactKind.INTRO_TEXT})


@dataclass(frozen=True, slots=True)
class ArtifactLocation:
    """Resolved artifact path and its existence at lookup time."""

    kind: ArtifactKind
    path: Path
    exists: bool


class ArtifactLocator:
    """Compute canonical artifact paths under document and output directories."""

    def __init__(self, output_dir: Path) -> None:
        """Initialize the locator with the shared audio output directory."""

        self.output_dir = output_dir.resolve()

    def path_for(self, chapter_id: str, kind: ArtifactKind, document_dir: Path) -> Path:
        """Return the canonical absolute path for one artifact."""

        if kind in _DOCUMENT_SIDE_KINDS:
            base = document_dir.resolve()
        else:
            base = self.output_dir
        return base / _file_name(chapter_id, kind)

    def locate(
        self, chapter_id: str, kind: ArtifactKind, document_dir: Path
    ) -> ArtifactLocation:
        """Return the artifact path and a fresh existence flag."""

        path = self.path_for(chapter_id, kind, document_dir)
        return ArtifactLocation(kind=kind, path=path, exists=_stat_exists(path))

    def locate_for(self, document: SourceDocument, kind: ArtifactKind) -> ArtifactLocation:
        """Locate one artifact of a source document."""

        return self.locate(document.chapter_id, kind, document.directory)

    def stage_outputs(
        self, document: SourceDocument, stage: PipelineStage
    ) -> tuple[ArtifactLocation, ...]:
        """Locate every output artifact of a stage for one document."""

        return tuple(self.locate_for(document, kind) for kind in stage.outputs)

    def outputs_complete(self, document: SourceDocument, stage: PipelineStage) -> bool:
        """Return whether every output of the stage already exists."""

        return all(location.exists for location in self.stage_outputs(document, stage))

    def missing_dependencies(
        self, document: SourceDocument, stage: PipelineStage
    ) -> tuple[ArtifactKind, ...]:
        """Return dependency artifact kinds that do not exist yet, in declared order."""

        return tuple(
            kind
            for kind in stage.dependencies
            if not self.locate_for(document, kind).exists
        )


def _file_name(chapter_id: str, kind: ArtifactKind) -> str:
    """Return the artifact file name for one chapter and kind."""

    if kind is ArtifactKind.TRANSCRIPT:
        return f"{chapter_id}.conversation.txt"
    if kind is ArtifactKind.CONTENT_AUDIO:
        return f"{chapter_id}.mp3"
    if kind is ArtifactKind.INTRO_TEXT:
        return f"intro_{chapter_id}.txt"
    if kind is ArtifactKind.INTRO_AUDIO:
        return f"intro_{chapter_id}.mp3"
    return f"chapter_{chapter_id}.mp3"


def _stat_exists(path: Path) -> bool:
    """Stat a path, treating only "not found" as absence."""

    try:
        path.stat()
    except FileNotFoundError:
        return False
    except NotADirectoryError:
        return False
    except OSError as exc:
        raise ArtifactIOError(f"Failed to check artifact `{path}`: {exc}") from exc
    return True
