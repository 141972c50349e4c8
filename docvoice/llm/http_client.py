"""HTTP client utilities for transcript and narration providers.

Responsibilities:
- Send JSON POST requests to OpenAI-compatible and Ollama REST endpoints.
- Normalize response extraction for chat completions, local completions, and speech.
- Raise `ProviderError` with a classified failure kind for CLI diagnostics.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

from ..errors import ProviderError


class JSONPostClient:
    """Shared HTTP settings and failure mapping for provider endpoints."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        base_url: str,
        provider_label: str,
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        """Initialize endpoint settings for one provider."""

        self.base_url = base_url.rstrip("/")
        self.provider_label = provider_label
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.timeout_seconds = timeout_seconds

    def require_api_key(self, stage: str) -> None:
        """Fail before any request when an API key is required but absent."""

        if not self.api_key:
            raise ProviderError(
                f"Missing {self.provider_label} API key.",
                stage=stage,
                failure_kind="invalid_api_key",
                hint="Set `OPENAI_API_KEY` or pass `--api-key`.",
            )

    def post_json(self, endpoint_path: str, payload: dict[str, Any], *, stage: str) -> bytes:
        """POST a JSON payload and return raw response bytes."""

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._http_error(exc, stage) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"{self.provider_label} request timed out."
            else:
                detail = (
                    f"{self.provider_label} request transport error: "
                    f"{self._short_message(str(exc))}"
                )
            raise ProviderError(detail, stage=stage, failure_kind=failure_kind) from exc
        return bytes(response.content)

    def post_for_json(
        self, endpoint_path: str, payload: dict[str, Any], *, stage: str
    ) -> dict[str, Any]:
        """POST a JSON payload and decode a JSON object response."""

        raw = self.post_json(endpoint_path, payload, stage=stage)
        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProviderError(
                f"{self.provider_label} returned an invalid JSON payload.",
                stage=stage,
                failure_kind="malformed_response",
            ) from exc
        if not isinstance(decoded, dict):
            raise ProviderError(
                f"{self.provider_label} response is not a JSON object.",
                stage=stage,
                failure_kind="malformed_response",
            )
        return decoded

    @staticmethod
    def _redact(text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        return re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Collapse whitespace and cap user-facing message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _error_message(cls, response: requests.Response | None) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider error code."""

        if response is None:
            return "", None
        body = bytes(response.content).decode("utf-8", errors="replace").strip()
        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact(body)), None

        message: str = body
        provider_code: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                code = error_payload.get("code")
                if isinstance(code, str) and code.strip():
                    provider_code = code.strip()
                text = error_payload.get("message")
                if isinstance(text, str) and text.strip():
                    message = text.strip()
            elif isinstance(error_payload, str) and error_payload.strip():
                # Ollama reports `{"error": "<message>"}`.
                message = error_payload.strip()
        return cls._short_message(cls._redact(message)), provider_code

    @staticmethod
    def _classify_http_failure(status_code: int, message: str, provider_code: str | None) -> str:
        """Classify HTTP failures into deterministic diagnostic kinds."""

        message_lower = message.lower()
        code = provider_code.lower() if provider_code else ""
        if status_code == 401 or "api key" in message_lower:
            return "invalid_api_key"
        if code == "insufficient_quota" or (status_code == 429 and "quota" in message_lower):
            return "insufficient_quota"
        if code == "model_not_found" or (
            "model" in message_lower and ("not found" in message_lower or "does not exist" in message_lower)
        ):
            return "invalid_model"
        if status_code in {408, 504}:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures."""

        if isinstance(reason, (requests.Timeout, socket.timeout, TimeoutError)):
            return "timeout"
        return "transport"

    def _http_error(self, exc: requests.HTTPError, stage: str) -> ProviderError:
        """Convert an HTTP error into a classified provider error."""

        status_code = exc.response.status_code if exc.response is not None else 0
        message, provider_code = self._error_message(exc.response)
        failure_kind = self._classify_http_failure(status_code, message, provider_code)
        headline = {
            "invalid_api_key": "authentication failed",
            "insufficient_quota": "quota is insufficient for this request",
            "invalid_model": "rejected the selected model",
            "timeout": "request timed out",
        }.get(failure_kind, "request failed")
        detail = f"{self.provider_label} {headline} (HTTP {status_code})"
        detail = f"{detail}: {message}" if message else f"{detail}."
        return ProviderError(
            detail,
            stage=stage,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )


def chat_message_text(payload: dict[str, Any], *, provider_label: str, stage: str) -> str:
    """Extract the first assistant message text from a chat-completions payload."""

    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ProviderError(
            f"{provider_label} response missing non-empty `choices` list.",
            stage=stage,
            failure_kind="malformed_response",
        )
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        content = "".join(
            item["text"]
            for item in content
            if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str)
        )
    return _require_text(content, provider_label=provider_label, stage=stage)


def completion_text(payload: dict[str, Any], *, provider_label: str, stage: str) -> str:
    """Extract generated text from an Ollama `/api/generate` payload."""

    return _require_text(payload.get("response"), provider_label=provider_label, stage=stage)


def _require_text(value: object, *, provider_label: str, stage: str) -> str:
    """Return non-blank text or raise a provider error."""

    if not isinstance(value, str) or not value.strip():
        raise ProviderError(
            f"{provider_label} response contained no usable text.",
            stage=stage,
            failure_kind="empty_response",
        )
    return value
