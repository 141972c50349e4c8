"""Unit tests for per-stage executors."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from docvoice.errors import ArtifactIOError, DependencyMissingError, ProviderError
from docvoice.models.datatypes import SourceDocument
from docvoice.pipeline.executors import (
    IntroExecutor,
    MergeExecutor,
    NarrationExecutor,
    TranscriptExecutor,
)
from docvoice.telemetry.logger import RunLogger


def _document(tmp_path: Path, text: str, chapter_id: str = "a") -> SourceDocument:
    """Write one document and return its record."""

    path = tmp_path / f"{chapter_id}.md"
    path.write_text(text, encoding="utf-8")
    return SourceDocument(path=path, chapter_id=chapter_id)


def test_transcript_executor_sends_truncated_text_and_logs_warning(
    tmp_path: Path, transcript_provider
) -> None:
    """Oversized documents should reach the provider as their first 4000 characters."""

    text = "x" * 4000 + "y" * 1000
    document = _document(tmp_path, text)
    transcript_path = tmp_path / "a.conversation.txt"
    sink = io.StringIO()

    TranscriptExecutor(transcript_provider, run_logger=RunLogger(sink=sink)).execute(
        document, transcript_path
    )

    assert transcript_provider.calls == ["x" * 4000]
    assert transcript_path.read_text(encoding="utf-8") == (
        "Jaf: Let us talk.\nPaul: " + "x" * 4000
    )
    assert "level=WARNING stage=transcript event=truncated" in sink.getvalue()
    assert "chapter=a chars=5000 limit=4000" in sink.getvalue()


def test_transcript_executor_passes_short_text_unchanged_without_warning(
    tmp_path: Path, transcript_provider
) -> None:
    """Documents under the limit should be sent in full and not logged as truncated."""

    document = _document(tmp_path, "z" * 3000)
    sink = io.StringIO()

    TranscriptExecutor(transcript_provider, run_logger=RunLogger(sink=sink)).execute(
        document, tmp_path / "a.conversation.txt"
    )

    assert transcript_provider.calls == ["z" * 3000]
    assert "truncated" not in sink.getvalue()


def test_transcript_executor_rejects_blank_provider_output(tmp_path: Path) -> None:
    """A blank transcript should fail the stage and leave no artifact behind."""

    class _BlankProvider:
        def generate_transcript(self, text: str) -> str:
            _ = text
            return "   "

    document = _document(tmp_path, "hello")
    transcript_path = tmp_path / "a.conversation.txt"

    with pytest.raises(ProviderError, match="no usable text") as exc_info:
        TranscriptExecutor(_BlankProvider()).execute(document, transcript_path)

    assert exc_info.value.failure_kind == "empty_response"
    assert not transcript_path.exists()


def test_transcript_executor_maps_unreadable_document_to_io_error(
    tmp_path: Path, transcript_provider
) -> None:
    """A missing source file should surface as an artifact IO error for the stage."""

    document = SourceDocument(path=tmp_path / "gone.md", chapter_id="gone")

    with pytest.raises(ArtifactIOError) as exc_info:
        TranscriptExecutor(transcript_provider).execute(document, tmp_path / "gone.conversation.txt")

    assert exc_info.value.stage == "transcript"
    assert transcript_provider.calls == []


def test_narration_executor_narrates_full_transcript(tmp_path: Path, narrator) -> None:
    """The whole transcript should be narrated and the bytes written verbatim."""

    transcript_path = tmp_path / "a.conversation.txt"
    transcript_path.write_text("Jaf: hi\nPaul: hello", encoding="utf-8")
    audio_path = tmp_path / "out" / "a.mp3"

    NarrationExecutor(narrator).execute(transcript_path, audio_path)

    assert narrator.calls == ["Jaf: hi\nPaul: hello"]
    assert audio_path.read_bytes() == b"audio:Jaf: hi\nPaul: hello"
    assert not audio_path.with_name("a.mp3.tmp").exists()


def test_narration_executor_failure_leaves_no_audio(tmp_path: Path, narrator) -> None:
    """Provider failures should propagate without writing the output artifact."""

    transcript_path = tmp_path / "a.conversation.txt"
    transcript_path.write_text("Jaf: FAIL", encoding="utf-8")
    audio_path = tmp_path / "a.mp3"
    narrator.fail_on = "FAIL"

    with pytest.raises(ProviderError):
        NarrationExecutor(narrator).execute(transcript_path, audio_path)

    assert not audio_path.exists()


def test_intro_executor_writes_fixed_template_then_narrates_it(
    tmp_path: Path, narrator
) -> None:
    """Intro script should follow the chapter template and be the narrated text."""

    script_path = tmp_path / "intro_setup.txt"
    audio_path = tmp_path / "intro_setup.mp3"

    IntroExecutor(narrator).execute("setup", script_path, audio_path)

    assert script_path.read_text(encoding="utf-8") == "Chapter setup. About setup."
    assert narrator.calls == ["Chapter setup. About setup."]
    assert audio_path.read_bytes() == b"audio:Chapter setup. About setup."


def test_merge_executor_joins_intro_before_content(tmp_path: Path, concatenator) -> None:
    """Merged chapter should be intro audio followed by content audio."""

    intro = tmp_path / "intro_a.mp3"
    content = tmp_path / "a.mp3"
    merged = tmp_path / "chapter_a.mp3"
    intro.write_bytes(b"INTRO")
    content.write_bytes(b"CONTENT")

    MergeExecutor(concatenator).execute(intro, content, merged)

    assert concatenator.calls == [(intro, content, merged)]
    assert merged.read_bytes() == b"INTROCONTENT"


def test_merge_executor_raises_dependency_error_for_missing_inputs(
    tmp_path: Path, concatenator
) -> None:
    """Merge should name absent inputs instead of calling the concatenator."""

    content = tmp_path / "a.mp3"
    content.write_bytes(b"CONTENT")

    with pytest.raises(DependencyMissingError) as exc_info:
        MergeExecutor(concatenator).execute(tmp_path / "intro_a.mp3", content, tmp_path / "x.mp3")

    assert exc_info.value.missing == ("intro_audio",)
    assert exc_info.value.stage == "merge"
    assert concatenator.calls == []
