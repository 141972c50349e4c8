"""Transcript provider interfaces and implementations.

Responsibilities:
- Define the `TranscriptProvider` capability used by the transcript stage.
- Provide a local Ollama completion variant and a remote OpenAI chat variant.
"""

from __future__ import annotations

from typing import Protocol

from .http_client import JSONPostClient, chat_message_text, completion_text
from .prompts import DialoguePrompt

_STAGE = "transcript"


class TranscriptProvider(Protocol):
    """Protocol for providers that turn document text into a dialogue transcript."""

    def generate_transcript(self, text: str) -> str:
        """Return a two-person dialogue transcript for the given document text."""


class OllamaTranscriptProvider:
    """Local transcript provider backed by the Ollama `/api/generate` endpoint."""

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        prompt: DialoguePrompt | None = None,
        timeout_seconds: float = 300.0,
    ) -> None:
        self.model = model
        self.prompt = prompt if prompt is not None else DialoguePrompt()
        self.client = JSONPostClient(
            base_url=base_url,
            provider_label="Ollama",
            timeout_seconds=timeout_seconds,
        )

    def generate_transcript(self, text: str) -> str:
        """Request a non-streaming completion from the local model."""

        payload = self.client.post_for_json(
            "/api/generate",
            {
                "model": self.model,
                "system": self.prompt.system,
                "prompt": self.prompt.user_message(text),
                "stream": False,
            },
            stage=_STAGE,
        )
        return completion_text(payload, provider_label="Ollama", stage=_STAGE)


class OpenAITranscriptProvider:
    """Remote transcript provider backed by OpenAI chat completions."""

    def __init__(
        self,
        model: str,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        prompt: DialoguePrompt | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout_seconds: float = 120.0,
    ) -> None:
        self.model = model
        self.prompt = prompt if prompt is not None else DialoguePrompt()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = JSONPostClient(
            base_url=base_url,
            provider_label="OpenAI",
            api_key=api_key,
            timeout_seconds=timeout_seconds,
        )

    def generate_transcript(self, text: str) -> str:
        """Request one chat completion and return the assistant message text."""

        self.client.require_api_key(_STAGE)
        payload = self.client.post_for_json(
            "/chat/completions",
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": self.prompt.system},
                    {"role": "user", "content": self.prompt.user_message(text)},
                ],
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
            stage=_STAGE,
        )
        return chat_message_text(payload, provider_label="OpenAI", stage=_STAGE)
