"""Stage executors: one unit per pipeline stage.

Each executor consumes one external collaborator and writes its artifact(s).
Executors do not check whether their outputs already exist; the orchestrator
does that before invoking them, and calling an executor directly overwrites.
"""

from __future__ import annotations

from pathlib import Path

from ..audio.concatenator import AudioConcatenator
from ..errors import DependencyMissingError, ProviderError
from ..io.discovery import read_document_text
from ..io.storage import load_text, save_bytes, save_text
from ..llm.prompts import intro_script
from ..llm.transcript import TranscriptProvider
from ..models.datatypes import ArtifactKind, PipelineStage, SourceDocument
from ..telemetry.logger import RunLogger
from ..tts.narrator import NarrationProvider
from .truncation import DEFAULT_MAX_DOCUMENT_CHARS, truncate_document_text


class TranscriptExecutor:
    """Generate a dialogue transcript from document text."""

    def __init__(
        self,
        provider: TranscriptProvider,
        max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.provider = provider
        self.max_document_chars = max_document_chars
        self._run_logger = run_logger

    def execute(self, document: SourceDocument, transcript_path: Path) -> Path:
        """Read, truncate, and convert one document, writing the transcript verbatim."""

        stage = PipelineStage.TRANSCRIPT.value
        raw_text = read_document_text(document)
        prepared = truncate_document_text(raw_text, self.max_document_chars)
        if prepared.truncated and self._run_logger is not None:
            self._run_logger.log_truncation(
                document.chapter_id, prepared.original_length, self.max_document_chars
            )

        transcript = self.provider.generate_transcript(prepared.text)
        if not isinstance(transcript, str) or not transcript.strip():
            raise ProviderError(
                "Transcript provider returned no usable text.",
                stage=stage,
                failure_kind="empty_response",
            )
        return save_text(transcript_path, transcript, stage=stage)


class NarrationExecutor:
    """Narrate an existing transcript into content audio."""

    def __init__(self, narrator: NarrationProvider) -> None:
        self.narrator = narrator

    def execute(self, transcript_path: Path, audio_path: Path) -> Path:
        """Synthesize the full transcript text and write the audio bytes verbatim."""

        stage = PipelineStage.NARRATION.value
        transcript = load_text(transcript_path, stage=stage)
        audio = self.narrator.synthesize(transcript)
        return save_bytes(audio_path, audio, stage=stage)


class IntroExecutor:
    """Write and narrate the fixed-template chapter intro."""

    def __init__(self, narrator: NarrationProvider) -> None:
        self.narrator = narrator

    def write_script(self, chapter_id: str, script_path: Path) -> Path:
        """Write the intro script for one chapter."""

        return save_text(script_path, intro_script(chapter_id), stage=PipelineStage.INTRO.value)

    def narrate(self, script_path: Path, audio_path: Path) -> Path:
        """Narrate an intro script into intro audio."""

        stage = PipelineStage.INTRO.value
        script = load_text(script_path, stage=stage)
        audio = self.narrator.synthesize(script)
        return save_bytes(audio_path, audio, stage=stage)

    def execute(self, chapter_id: str, script_path: Path, audio_path: Path) -> Path:
        """Write the script, then narrate it."""

        self.write_script(chapter_id, script_path)
        return self.narrate(script_path, audio_path)


class MergeExecutor:
    """Join intro audio and content audio into the final chapter."""

    def __init__(self, concatenator: AudioConcatenator) -> None:
        self.concatenator = concatenator

    def execute(self, intro_audio: Path, content_audio: Path, merged_path: Path) -> Path:
        """Concatenate intro then content audio into `merged_path`."""

        missing = tuple(
            kind.value
            for kind, path in (
                (ArtifactKind.INTRO_AUDIO, intro_audio),
                (ArtifactKind.CONTENT_AUDIO, content_audio),
            )
            if not path.exists()
        )
        if missing:
            raise DependencyMissingError(stage=PipelineStage.MERGE.value, missing=missing)
        self.concatenator.concat(intro_audio, content_audio, merged_path)
        return merged_path
