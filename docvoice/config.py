"""Configuration model and loaders for Docvoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Load defaults from a YAML file, environment variables, and a `.env` file.
- Apply deterministic precedence: CLI > environment > YAML > field default.

Key types:
- `ModelProvider`: tagged choice between local and remote transcript generation.
- `DocvoiceConfig`: normalized runtime settings for a pipeline run.
- `ConfigLoader`: static construction helpers for `DocvoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
import yaml

from .parsing import normalize_optional_string, parse_extension_list, parse_positive_int
from .pipeline.truncation import DEFAULT_MAX_DOCUMENT_CHARS

_DEFAULT_OLLAMA_MODEL = "llama3.2"
_DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
_DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
_DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
_DEFAULT_TTS_MODEL = "tts-1"
_DEFAULT_TTS_VOICE = "alloy"


class ModelProvider(str, Enum):
    """Transcript generation backend."""

    LOCAL = "local"
    REMOTE = "remote"

    @classmethod
    def parse(cls, value: str) -> ModelProvider:
        """Parse a provider token, accepting backend names as aliases."""

        token = value.strip().lower()
        aliases = {"ollama": cls.LOCAL, "openai": cls.REMOTE}
        if token in aliases:
            return aliases[token]
        try:
            return cls(token)
        except ValueError as exc:
            raise ValueError(
                f"Unsupported `model_provider` value `{value}`; supported: local, remote."
            ) from exc


@dataclass(frozen=True, slots=True)
class DocvoiceConfig:
    """Runtime configuration for one pipeline run.

    Attributes:
        docs_path: Root directory searched for source documents.
        output_dir: Directory receiving audio artifacts.
        model_provider: Transcript backend used when transcripts are generated.
        ollama_model: Local model identifier.
        ollama_base_url: Local completion endpoint base URL.
        openai_model: Remote chat model identifier.
        openai_api_key: API key for remote transcript and narration calls.
        openai_base_url: Remote API base URL.
        tts_model: Narration model identifier.
        tts_voice: Narration voice identifier.
        max_document_chars: Truncation limit applied before transcript generation.
        document_extensions: File extensions treated as source documents.
    """

    docs_path: Path
    output_dir: Path
    model_provider: ModelProvider = ModelProvider.LOCAL
    ollama_model: str = _DEFAULT_OLLAMA_MODEL
    ollama_base_url: str = _DEFAULT_OLLAMA_BASE_URL
    openai_model: str = _DEFAULT_OPENAI_MODEL
    openai_api_key: str | None = None
    openai_base_url: str = _DEFAULT_OPENAI_BASE_URL
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS
    document_extensions: tuple[str, ...] = (".md",)

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        for name in (
            "ollama_model",
            "ollama_base_url",
            "openai_model",
            "openai_base_url",
            "tts_model",
            "tts_voice",
        ):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"`{name}` must be a non-empty string.")
        if self.max_document_chars <= 0:
            raise ValueError("`max_document_chars` must be a positive integer.")
        if not self.document_extensions:
            raise ValueError("`document_extensions` must name at least one extension.")


class ConfigLoader:
    """Factory methods for creating `DocvoiceConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"docs_path", "output_dir"})
    _SUPPORTED_YAML_KEYS = frozenset(field.name for field in fields(DocvoiceConfig))
    _ENV_KEYS: dict[str, str] = {
        "DOCS_PATH": "docs_path",
        "AUDIO_OUTPUT_PATH": "output_dir",
        "DOCVOICE_MODEL_PROVIDER": "model_provider",
        "OLLAMA_MODEL": "ollama_model",
        "OLLAMA_BASE_URL": "ollama_base_url",
        "OPENAI_MODEL": "openai_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_BASE_URL": "openai_base_url",
        "DOCVOICE_TTS_MODEL": "tts_model",
        "DOCVOICE_TTS_VOICE": "tts_voice",
        "DOCVOICE_MAX_DOCUMENT_CHARS": "max_document_chars",
        "DOCVOICE_DOCUMENT_EXTENSIONS": "document_extensions",
    }

    @staticmethod
    def from_yaml(path: Path) -> DocvoiceConfig:
        """Create a validated config from a YAML file."""

        payload = ConfigLoader._parse_yaml_payload(path.read_text(encoding="utf-8"), path)
        source_label = f"YAML `{path}`"
        ConfigLoader._validate_yaml_keys(payload, source_label)
        config = DocvoiceConfig(**_coerce_fields(payload, source_label=source_label))
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> DocvoiceConfig:
        """Create a validated config from environment variables only."""

        values = ConfigLoader.env_values(env)
        missing = [
            env_key
            for env_key, name in ConfigLoader._ENV_KEYS.items()
            if name in {"docs_path", "output_dir"} and name not in values
        ]
        if missing:
            raise ValueError(
                "Environment variable(s) required: " + ", ".join(sorted(missing)) + "."
            )
        config = DocvoiceConfig(**_coerce_fields(values, source_label="environment"))
        config.validate()
        return config

    @staticmethod
    def env_values(env: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return config field values present in the environment."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        values: dict[str, str] = {}
        for env_key, name in ConfigLoader._ENV_KEYS.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                values[name] = value
        return values

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required YAML keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        missing = sorted(key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload)
        if missing:
            raise ValueError(f"{source_label} is missing required key(s): {', '.join(missing)}.")


def resolve_config(
    *,
    config_file: Path | None,
    overrides: Mapping[str, object],
    env: Mapping[str, str] | None = None,
    dotenv_path: Path | None = None,
) -> DocvoiceConfig:
    """Resolve the effective config: CLI overrides > environment > YAML > defaults.

    Without a YAML file, `docs_path` and `output_dir` default to `docs` and `out`.
    Without an explicit `env`, the process environment is layered over a `.env`
    file (`dotenv_path`, default `.env` in the working directory); variables
    already set in the process win.
    """

    merged: dict[str, object] = {}
    if config_file is not None:
        base = ConfigLoader.from_yaml(config_file)
        merged.update({field.name: getattr(base, field.name) for field in fields(base)})
    else:
        merged.update({"docs_path": Path("docs"), "output_dir": Path("out")})
    environment = env if env is not None else _process_environment(dotenv_path)
    merged.update(ConfigLoader.env_values(environment))
    merged.update(
        {
            key: value
            for key, value in overrides.items()
            if value is not None and normalize_optional_string(value) is not None
        }
    )
    config = DocvoiceConfig(**_coerce_fields(merged, source_label="configuration"))
    config.validate()
    return config


def _process_environment(dotenv_path: Path | None) -> dict[str, str]:
    """Return `os.environ` layered over the values of a `.env` file, if present."""

    path = Path(".env") if dotenv_path is None else dotenv_path
    layered: dict[str, str] = {}
    if path.is_file():
        layered.update(
            {key: value for key, value in dotenv_values(path).items() if value is not None}
        )
    layered.update(os.environ)
    return layered


def _coerce_fields(payload: Mapping[str, object], *, source_label: str) -> dict[str, Any]:
    """Convert raw mapping values into typed `DocvoiceConfig` field values."""

    coerced: dict[str, Any] = {}
    for key, raw_value in payload.items():
        if key in {"docs_path", "output_dir"}:
            value = normalize_optional_string(raw_value)
            if value is None:
                raise ValueError(f"{source_label} requires non-empty `{key}`.")
            coerced[key] = Path(value)
        elif key == "model_provider":
            coerced[key] = (
                raw_value
                if isinstance(raw_value, ModelProvider)
                else ModelProvider.parse(str(raw_value))
            )
        elif key == "max_document_chars":
            coerced[key] = parse_positive_int(raw_value, key)
        elif key == "document_extensions":
            coerced[key] = parse_extension_list(raw_value, key)
        elif key == "openai_api_key":
            coerced[key] = normalize_optional_string(raw_value)
        else:
            value = normalize_optional_string(raw_value)
            if value is None:
                raise ValueError(f"{source_label} field `{key}` must be a non-empty string.")
            coerced[key] = value
    return coerced
