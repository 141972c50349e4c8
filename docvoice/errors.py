"""Domain exceptions for pipeline and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
        chapter_id: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
        self.chapter_id = chapter_id


class InvalidIdentifierError(PipelineStageError):
    """Raised when a document path yields no usable chapter identifier."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        super().__init__(stage="identity", detail=detail, hint=hint)


class ProviderError(PipelineStageError):
    """Raised when a transcript or narration provider call fails or returns unusable output."""

    def __init__(
        self,
        detail: str,
        *,
        stage: str = "provider",
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(stage=stage, detail=detail, hint=hint)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class ExternalToolError(PipelineStageError):
    """Raised when an external media tool is missing or exits non-zero."""

    def __init__(
        self,
        detail: str,
        *,
        returncode: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(stage="merge", detail=detail, hint=hint)
        self.returncode = returncode


class DependencyMissingError(PipelineStageError):
    """Raised when a stage is asked to run before its upstream artifacts exist.

    The orchestrator checks dependencies before invoking executors and maps this
    condition to a non-fatal pending state; executors raise it only when called
    directly with absent inputs.
    """

    def __init__(self, *, stage: str, missing: tuple[str, ...], chapter_id: str | None = None) -> None:
        detail = "Missing upstream artifact(s): " + ", ".join(missing) + "."
        super().__init__(stage=stage, detail=detail, chapter_id=chapter_id)
        self.missing = missing


class ArtifactIOError(PipelineStageError):
    """Raised when an artifact or document cannot be read, written, or stat-ed."""

    def __init__(self, detail: str, *, stage: str = "io", hint: str | None = None) -> None:
        super().__init__(stage=stage, detail=detail, hint=hint)
