"""Unit tests for stage sequencing, idempotent skips, and fail-fast behavior."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from docvoice.errors import ArtifactIOError, PipelineStageError, ProviderError
from docvoice.io import discover_documents
from docvoice.models.datatypes import PipelineStage, RunMode, RunPlan, StageState
from docvoice.pipeline import DocvoicePipeline
from docvoice.telemetry.logger import RunLogger


def _plan(docs_dir: Path, out_dir: Path, mode: RunMode = RunMode.FULL) -> RunPlan:
    """Build a plan over every document in `docs_dir`."""

    return RunPlan.build(documents=discover_documents(docs_dir), mode=mode, output_dir=out_dir)


def test_full_run_processes_stages_in_stage_major_order(
    tmp_path: Path, write_documents, transcript_provider, narrator, concatenator
) -> None:
    """Every document should finish a stage before any document starts the next one."""

    docs_dir = write_documents(a="a" * 500, b="b" * 500)
    out_dir = tmp_path / "out"
    progress: list[tuple[str, int, int]] = []
    pipeline = DocvoicePipeline(
        transcript_provider=transcript_provider,
        narrator=narrator,
        concatenator=concatenator,
        stage_progress_callback=lambda name, index, total: progress.append((name, index, total)),
    )

    report = pipeline.run(_plan(docs_dir, out_dir))

    assert [(outcome.stage.value, outcome.chapter_id) for outcome in report.outcomes] == [
        ("transcript", "a"),
        ("transcript", "b"),
        ("narration", "a"),
        ("narration", "b"),
        ("intro", "a"),
        ("intro", "b"),
        ("merge", "a"),
        ("merge", "b"),
    ]
    assert all(outcome.state is StageState.DONE for outcome in report.outcomes)
    assert progress == [
        ("transcript", 1, 4),
        ("narration", 2, 4),
        ("intro", 3, 4),
        ("merge", 4, 4),
    ]
    assert transcript_provider.calls == ["a" * 500, "b" * 500]
    assert narrator.calls[2:] == ["Chapter a. About a.", "Chapter b. About b."]
    assert (out_dir / "chapter_a.mp3").read_bytes() == (
        b"audio:Chapter a. About a." + b"audio:Jaf: Let us talk.\nPaul: " + b"a" * 500
    )
    assert report.processed_count == 8
    assert report.skipped_count == 0
    assert pipeline.last_report is report


def test_second_run_skips_every_pair_without_provider_calls(
    tmp_path: Path, write_documents, transcript_provider, narrator, concatenator
) -> None:
    """Re-running over complete artifacts should be a no-op."""

    docs_dir = write_documents(a="alpha", b="beta")
    out_dir = tmp_path / "out"
    pipeline = DocvoicePipeline(
        transcript_provider=transcript_provider, narrator=narrator, concatenator=concatenator
    )
    pipeline.run(_plan(docs_dir, out_dir))
    transcript_provider.calls.clear()
    narrator.calls.clear()
    concatenator.calls.clear()

    report = pipeline.run(_plan(docs_dir, out_dir))

    assert all(outcome.state is StageState.SKIPPED for outcome in report.outcomes)
    assert report.skipped_count == 8
    assert report.processed_count == 0
    assert transcript_provider.calls == []
    assert narrator.calls == []
    assert concatenator.calls == []


def test_existing_transcript_is_skipped_even_when_empty(
    tmp_path: Path, write_documents, transcript_provider
) -> None:
    """Existence alone marks a transcript complete; content is never inspected."""

    docs_dir = write_documents(a="alpha", b="beta")
    (docs_dir / "a.conversation.txt").write_text("", encoding="utf-8")
    pipeline = DocvoicePipeline(transcript_provider=transcript_provider)

    report = pipeline.run(_plan(docs_dir, tmp_path / "out", RunMode.TRANSCRIPTS_ONLY))

    assert report.states_for(PipelineStage.TRANSCRIPT) == [StageState.SKIPPED, StageState.DONE]
    assert transcript_provider.calls == ["beta"]
    assert (docs_dir / "a.conversation.txt").read_text(encoding="utf-8") == ""


def test_missing_dependencies_leave_pairs_pending_without_aborting(
    tmp_path: Path, write_documents, narrator, concatenator
) -> None:
    """Merge-only over partial artifacts should merge what it can and leave the rest pending."""

    docs_dir = write_documents(a="alpha", b="beta")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "intro_a.mp3").write_bytes(b"I")
    (out_dir / "a.mp3").write_bytes(b"C")
    (out_dir / "intro_b.mp3").write_bytes(b"I")
    sink = io.StringIO()
    pipeline = DocvoicePipeline(concatenator=concatenator, run_logger=RunLogger(sink=sink))

    report = pipeline.run(_plan(docs_dir, out_dir, RunMode.MERGE_ONLY))

    assert report.states_for(PipelineStage.MERGE) == [StageState.DONE, StageState.PENDING]
    assert report.pending_count == 1
    assert (out_dir / "chapter_a.mp3").read_bytes() == b"IC"
    assert not (out_dir / "chapter_b.mp3").exists()
    assert "level=WARNING stage=merge event=pending chapter=b missing=content_audio" in (
        sink.getvalue()
    )


def test_audio_only_without_transcripts_is_pending_not_failed(
    tmp_path: Path, write_documents, narrator
) -> None:
    """Narration with no transcript should never call the narrator."""

    docs_dir = write_documents(a="alpha")
    pipeline = DocvoicePipeline(narrator=narrator)

    report = pipeline.run(_plan(docs_dir, tmp_path / "out", RunMode.AUDIO_ONLY))

    assert report.states_for(PipelineStage.NARRATION) == [StageState.PENDING]
    assert narrator.calls == []


def test_first_failure_aborts_remaining_documents_and_stages(
    tmp_path: Path, write_documents, transcript_provider, narrator, concatenator
) -> None:
    """A narration failure on the second document should stop the whole run."""

    docs_dir = write_documents(a="alpha", b="FAIL beta", c="gamma")
    out_dir = tmp_path / "out"
    narrator.fail_on = "FAIL"
    sink = io.StringIO()
    pipeline = DocvoicePipeline(
        transcript_provider=transcript_provider,
        narrator=narrator,
        concatenator=concatenator,
        run_logger=RunLogger(sink=sink),
    )

    with pytest.raises(ProviderError) as exc_info:
        pipeline.run(_plan(docs_dir, out_dir))

    assert exc_info.value.stage == "narration"
    assert exc_info.value.chapter_id == "b"
    assert (out_dir / "a.mp3").exists()
    assert not (out_dir / "b.mp3").exists()
    assert not (out_dir / "c.mp3").exists()
    assert not any(out_dir.glob("intro_*"))
    assert not any(docs_dir.glob("intro_*"))

    report = pipeline.last_report
    assert report is not None
    assert report.states_for(PipelineStage.NARRATION) == [StageState.DONE, StageState.FAILED]
    assert PipelineStage.INTRO not in report.stages
    assert "level=ERROR stage=narration event=failure chapter=b error_type=ProviderError" in (
        sink.getvalue()
    )


def test_stage_without_collaborator_fails_with_config_error(
    tmp_path: Path, write_documents
) -> None:
    """A stage that must run without its collaborator should raise a config error."""

    docs_dir = write_documents(a="alpha")

    with pytest.raises(PipelineStageError, match="needs a transcript provider") as exc_info:
        DocvoicePipeline().run(_plan(docs_dir, tmp_path / "out", RunMode.TRANSCRIPTS_ONLY))

    assert exc_info.value.stage == "config"


def test_intro_stage_reuses_existing_script_and_narrates_missing_audio(
    tmp_path: Path, write_documents, narrator
) -> None:
    """An existing intro script should be narrated as-is, never rewritten."""

    docs_dir = write_documents(a="alpha")
    (docs_dir / "intro_a.txt").write_text("Custom intro for a.", encoding="utf-8")
    out_dir = tmp_path / "out"

    DocvoicePipeline(narrator=narrator).run(_plan(docs_dir, out_dir, RunMode.INTROS_ONLY))

    assert (docs_dir / "intro_a.txt").read_text(encoding="utf-8") == "Custom intro for a."
    assert narrator.calls == ["Custom intro for a."]
    assert (out_dir / "intro_a.mp3").read_bytes() == b"audio:Custom intro for a."


def test_intro_stage_fills_whichever_intro_half_is_missing(
    tmp_path: Path, write_documents, narrator
) -> None:
    """A fresh document gets script and audio; an existing audio file is never re-narrated."""

    docs_dir = write_documents(a="alpha", b="beta")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "intro_b.mp3").write_bytes(b"recorded intro")

    report = DocvoicePipeline(narrator=narrator).run(
        _plan(docs_dir, out_dir, RunMode.INTROS_ONLY)
    )

    assert report.states_for(PipelineStage.INTRO) == [StageState.DONE, StageState.DONE]
    assert narrator.calls == ["Chapter a. About a."]
    assert (docs_dir / "intro_a.txt").read_text(encoding="utf-8") == "Chapter a. About a."
    assert (out_dir / "intro_a.mp3").read_bytes() == b"audio:Chapter a. About a."
    assert (docs_dir / "intro_b.txt").read_text(encoding="utf-8") == "Chapter b. About b."
    assert (out_dir / "intro_b.mp3").read_bytes() == b"recorded intro"


def test_run_logger_emits_stage_and_run_timing(
    tmp_path: Path, write_documents, narrator
) -> None:
    """Structured logs should carry per-stage completion and run totals."""

    docs_dir = write_documents(a="alpha")
    sink = io.StringIO()

    report = DocvoicePipeline(narrator=narrator, run_logger=RunLogger(sink=sink)).run(
        _plan(docs_dir, tmp_path / "out", RunMode.INTROS_ONLY)
    )

    lines = sink.getvalue().splitlines()
    assert lines[0] == "[phase] level=INFO stage=intro event=start documents=1"
    assert lines[1].startswith("[phase] level=INFO stage=intro event=done chapter=a elapsed=")
    assert lines[2].startswith("[phase] level=INFO stage=intro event=complete elapsed=")
    assert lines[3].startswith("[phase] level=INFO stage=run event=complete documents=1 elapsed=")
    assert report.stages[PipelineStage.INTRO].elapsed_seconds >= 0.0
    assert report.total_seconds >= report.stages[PipelineStage.INTRO].elapsed_seconds


def test_unexpected_os_error_is_reported_with_stage_and_chapter(
    tmp_path: Path, write_documents, narrator
) -> None:
    """A collaborator raising a plain OSError should surface as a stage-scoped IO error."""

    class _ReadOnlyConcatenator:
        def concat(self, first: Path, second: Path, output_path: Path) -> None:
            raise PermissionError(13, "Permission denied", str(output_path))

    docs_dir = write_documents(a="alpha")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "intro_a.mp3").write_bytes(b"INTRO")
    (out_dir / "a.mp3").write_bytes(b"CONTENT")
    sink = io.StringIO()
    pipeline = DocvoicePipeline(
        narrator=narrator,
        concatenator=_ReadOnlyConcatenator(),
        run_logger=RunLogger(sink=sink),
    )

    with pytest.raises(ArtifactIOError, match="Permission denied") as exc_info:
        pipeline.run(_plan(docs_dir, out_dir, RunMode.MERGE_ONLY))

    assert exc_info.value.stage == "merge"
    assert exc_info.value.chapter_id == "a"
    assert isinstance(exc_info.value.__cause__, PermissionError)
    report = pipeline.last_report
    assert report is not None
    assert report.states_for(PipelineStage.MERGE) == [StageState.FAILED]
    assert "stage=merge event=failure chapter=a error_type=PermissionError" in sink.getvalue()
