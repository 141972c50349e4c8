"""Rendering of CLI diagnostics, document listings, and run summaries."""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import RunReport, SourceDocument


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print the failing stage (and chapter, when known) to stderr and exit 1."""

    if isinstance(exc, PipelineStageError):
        scope = f" for chapter `{exc.chapter_id}`" if exc.chapter_id else ""
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`{scope}: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_document_list(documents: list[SourceDocument]) -> None:
    """Print numbered document rows with their chapter ids."""

    if not documents:
        typer.echo("No documents found.")
        return
    for number, document in enumerate(documents, start=1):
        typer.echo(f"{number}. {document.chapter_id} ({document.path})")


def echo_run_report(report: RunReport) -> None:
    """Print per-stage counters, per-stage timing, and the run total."""

    for stage, stage_report in report.stages.items():
        typer.echo(
            f"Stage {stage.value}: processed={stage_report.processed} "
            f"skipped={stage_report.skipped} pending={stage_report.pending} "
            f"elapsed={stage_report.elapsed_seconds:.2f}s"
        )
    typer.echo(
        f"Total: processed={report.processed_count} skipped={report.skipped_count} "
        f"pending={report.pending_count} elapsed={report.total_seconds:.2f}s"
    )
