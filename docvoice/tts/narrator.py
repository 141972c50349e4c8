"""Narration provider interfaces and OpenAI-backed implementation."""

from __future__ import annotations

from typing import Protocol

from ..errors import ProviderError
from ..llm.http_client import JSONPostClient

_STAGE = "narration"


class NarrationProvider(Protocol):
    """Protocol for text-to-speech providers."""

    def synthesize(self, text: str) -> bytes:
        """Return encoded audio bytes for the given text."""


class OpenAINarrationProvider:
    """OpenAI `/audio/speech` narration returning MP3 bytes."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "tts-1",
        voice: str = "alloy",
        base_url: str = "https://api.openai.com/v1",
        response_format: str = "mp3",
        timeout_seconds: float = 300.0,
    ) -> None:
        self.model = model
        self.voice = voice
        self.response_format = response_format
        self.client = JSONPostClient(
            base_url=base_url,
            provider_label="OpenAI",
            api_key=api_key,
            timeout_seconds=timeout_seconds,
        )

    def synthesize(self, text: str) -> bytes:
        """Synthesize speech for `text` and return the raw audio payload."""

        self.client.require_api_key(_STAGE)
        audio = self.client.post_json(
            "/audio/speech",
            {
                "model": self.model,
                "voice": self.voice,
                "input": text,
                "response_format": self.response_format,
            },
            stage=_STAGE,
        )
        if not audio:
            raise ProviderError(
                "OpenAI speech response is empty.",
                stage=_STAGE,
                failure_kind="empty_response",
            )
        return audio
