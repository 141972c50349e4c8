"""Integration-test fixtures for deterministic provider and ffmpeg behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from docvoice.audio.concatenator import FfmpegConcatenator
from docvoice.errors import ProviderError
from docvoice.llm.transcript import OllamaTranscriptProvider, OpenAITranscriptProvider
from docvoice.tts.narrator import OpenAINarrationProvider

NARRATION_FAILURE_MARKER = "FAIL-NARRATION"


@pytest.fixture(autouse=True)
def _mock_external_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock model, speech, and ffmpeg calls to avoid network and binary requirements."""

    def _mock_generate_transcript(self, text: str) -> str:
        """Return a deterministic dialogue that tags the backend and echoes the text."""

        backend = "ollama" if isinstance(self, OllamaTranscriptProvider) else "openai"
        return f"[{backend}] Jaf: Welcome.\nPaul: {text}"

    def _mock_synthesize(self, text: str) -> bytes:
        """Return placeholder audio bytes, failing for marked transcripts."""

        _ = self
        if NARRATION_FAILURE_MARKER in text:
            raise ProviderError("OpenAI request failed (HTTP 500).", stage="narration")
        return b"mp3:" + text.encode("utf-8")

    def _mock_concat(self, first: Path, second: Path, output_path: Path) -> None:
        """Join raw bytes in order instead of invoking ffmpeg."""

        _ = self
        output_path.write_bytes(first.read_bytes() + second.read_bytes())

    monkeypatch.setattr(
        OllamaTranscriptProvider, "generate_transcript", _mock_generate_transcript
    )
    monkeypatch.setattr(
        OpenAITranscriptProvider, "generate_transcript", _mock_generate_transcript
    )
    monkeypatch.setattr(OpenAINarrationProvider, "synthesize", _mock_synthesize)
    monkeypatch.setattr(FfmpegConcatenator, "concat", _mock_concat)
