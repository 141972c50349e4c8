"""Command-line interface for Docvoice.

Responsibilities:
- Expose user-facing commands for pipeline runs and document listing.
- Turn operator choices (run mode, document, model provider) into one `RunPlan`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated, TypeVar

import typer

from .cli_rendering import echo_document_list, echo_run_report, exit_with_command_error
from .config import DocvoiceConfig, ModelProvider, resolve_config
from .errors import PipelineStageError
from .io.discovery import discover_documents, find_document
from .models.datatypes import RunMode, RunPlan, SourceDocument
from .pipeline import DocvoicePipeline
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="docvoice",
    no_args_is_help=True,
    help="Docvoice CLI: turn documentation into narrated audio chapters.",
)

_Choice = TypeVar("_Choice")


class StageProgressIndicator:
    """Render deterministic per-stage progress lines."""

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        typer.echo(
            f"[progress] command={self._command_name} "
            f"{stage_index}/{stage_total} stage={stage_name}"
        )


def _prompt_choice(title: str, options: list[tuple[str, _Choice]], default: int = 1) -> _Choice:
    """Show a numbered menu and return the chosen option value."""

    typer.echo(title)
    for number, (label, _) in enumerate(options, start=1):
        typer.echo(f"  {number}. {label}")
    while True:
        selected = typer.prompt("Select", default=default, type=int)
        if 1 <= selected <= len(options):
            return options[selected - 1][1]
        typer.echo(f"Enter a number between 1 and {len(options)}.")


def _load_config(config_file: Path | None, overrides: dict[str, object]) -> DocvoiceConfig:
    """Resolve effective config and map failures to stage errors."""

    try:
        return resolve_config(config_file=config_file, overrides=overrides)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Fix config file, environment, or CLI values and rerun.",
        ) from exc


def _resolve_mode(mode: RunMode | None, interactive: bool) -> RunMode:
    """Return the CLI run mode or ask the operator for one."""

    if mode is not None:
        return mode
    if not interactive:
        raise PipelineStageError(
            stage="config",
            detail="No run mode selected.",
            hint="Pass `--mode` or drop `--no-interactive`.",
        )
    return _prompt_choice(
        "Choose what to run:",
        [(run_mode.value, run_mode) for run_mode in RunMode],
        default=list(RunMode).index(RunMode.FULL) + 1,
    )


def _resolve_document(
    documents: list[SourceDocument],
    selector: str | None,
    mode: RunMode,
    interactive: bool,
) -> SourceDocument | None:
    """Return the operator-selected document, prompting in single-document mode."""

    if selector is not None:
        return find_document(documents, selector)
    if not mode.requires_single_document:
        return None
    if not documents:
        raise PipelineStageError(
            stage="discover",
            detail="No documents found to select from.",
            hint="Check `--docs` and the configured document extensions.",
        )
    if not interactive:
        raise PipelineStageError(
            stage="config",
            detail="Single-document mode needs a document.",
            hint="Pass `--document <path-or-chapter-id>`.",
        )
    return _prompt_choice(
        "Choose a document:",
        [(f"{document.chapter_id} ({document.path})", document) for document in documents],
    )


def _resolve_model_provider(
    provider: str | None, config: DocvoiceConfig, interactive: bool
) -> ModelProvider:
    """Return the transcript backend from CLI, prompt, or config default."""

    if provider is not None:
        try:
            return ModelProvider.parse(provider)
        except ValueError as exc:
            raise PipelineStageError(stage="config", detail=str(exc)) from exc
    if not interactive:
        return config.model_provider
    options = [("Ollama (local)", ModelProvider.LOCAL), ("OpenAI (remote)", ModelProvider.REMOTE)]
    default = 1 if config.model_provider is ModelProvider.LOCAL else 2
    return _prompt_choice("Choose your model provider:", options, default=default)


@app.command("run")
def run_command(
    mode: Annotated[
        RunMode | None,
        typer.Option("--mode", help="Run mode. Prompted for when omitted."),
    ] = None,
    document: Annotated[
        str | None,
        typer.Option(
            "--document",
            help="Document path or chapter id. Required (or prompted) in single-document mode.",
        ),
    ] = None,
    model_provider: Annotated[
        str | None,
        typer.Option(
            "--model-provider",
            help="Transcript backend: `local` (Ollama) or `remote` (OpenAI).",
        ),
    ] = None,
    docs: Annotated[
        Path | None,
        typer.Option("--docs", help="Documents directory (overrides config/env)."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Audio output directory (overrides config/env)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with defaults."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="OpenAI API key override."),
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive/--no-interactive",
            help="Prompt for missing run mode, document, and model provider.",
        ),
    ] = True,
) -> None:
    """Run pipeline stages over the discovered documents."""

    try:
        config = _load_config(
            config_file,
            {"docs_path": docs, "output_dir": out, "openai_api_key": api_key},
        )
        documents = discover_documents(config.docs_path, config.document_extensions)
        typer.echo(f"Found {len(documents)} document(s) in {config.docs_path}")

        selected_mode = _resolve_mode(mode, interactive)
        selected_document = _resolve_document(documents, document, selected_mode, interactive)
        plan = RunPlan.build(
            documents=documents,
            mode=selected_mode,
            output_dir=config.output_dir,
            selected=selected_document,
        )
        if plan.includes_transcripts:
            provider = _resolve_model_provider(model_provider, config, interactive)
            typer.echo(f"Model provider: {provider.value}")
            config = replace(config, model_provider=provider)

        collaborators = ProviderFactory.for_plan(plan, config)
        progress = StageProgressIndicator(command_name="run")
        pipeline = DocvoicePipeline(
            transcript_provider=collaborators.transcript_provider,
            narrator=collaborators.narrator,
            concatenator=collaborators.concatenator,
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
            max_document_chars=config.max_document_chars,
        )
        report = pipeline.run(plan)
    except Exception as exc:
        exit_with_command_error("run", exc)

    typer.echo(f"Run mode: {plan.mode.value}")
    echo_run_report(report)


@app.command("list-documents")
def list_documents_command(
    docs: Annotated[
        Path | None,
        typer.Option("--docs", help="Documents directory (overrides config/env)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with defaults."),
    ] = None,
) -> None:
    """List discovered documents and their chapter ids."""

    try:
        config = _load_config(config_file, {"docs_path": docs})
        documents = discover_documents(config.docs_path, config.document_extensions)
    except Exception as exc:
        exit_with_command_error("list-documents", exc)

    echo_document_list(documents)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
