"""Shared pytest fixtures for the full Docvoice test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from docvoice.audio.concatenator import FFMPEG_ENV_KEY
from docvoice.config import ConfigLoader
from docvoice.errors import ProviderError


class FakeTranscriptProvider:
    """Deterministic transcript provider that records every request."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def generate_transcript(self, text: str) -> str:
        """Return a short dialogue that quotes the received text."""

        self.calls.append(text)
        return f"Jaf: Let us talk.\nPaul: {text}"


class FakeNarrator:
    """Deterministic narrator returning text-derived bytes, optionally failing."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[str] = []
        self.fail_on = fail_on

    def synthesize(self, text: str) -> bytes:
        """Return placeholder audio bytes for `text`."""

        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise ProviderError("OpenAI request failed (HTTP 500).", stage="narration")
        return b"audio:" + text.encode("utf-8")


class FakeConcatenator:
    """Concatenator that joins raw bytes instead of invoking ffmpeg."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, Path]] = []

    def concat(self, first: Path, second: Path, output_path: Path) -> None:
        """Write `first` followed by `second` to `output_path`."""

        self.calls.append((first, second, output_path))
        output_path.write_bytes(first.read_bytes() + second.read_bytes())


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of config resolution."""

    for env_key in ConfigLoader._ENV_KEYS:
        monkeypatch.delenv(env_key, raising=False)
    monkeypatch.delenv(FFMPEG_ENV_KEY, raising=False)


@pytest.fixture
def write_documents(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes named documents under `tmp_path/docs`."""

    def _write(**documents: str) -> Path:
        docs_dir = tmp_path / "docs"
        docs_dir.mkdir(exist_ok=True)
        for name, text in documents.items():
            (docs_dir / f"{name}.md").write_text(text, encoding="utf-8")
        return docs_dir

    return _write


@pytest.fixture
def transcript_provider() -> FakeTranscriptProvider:
    """Provide a fresh recording transcript provider."""

    return FakeTranscriptProvider()


@pytest.fixture
def narrator() -> FakeNarrator:
    """Provide a fresh recording narrator."""

    return FakeNarrator()


@pytest.fixture
def concatenator() -> FakeConcatenator:
    """Provide a fresh byte-joining concatenator."""

    return FakeConcatenator()
