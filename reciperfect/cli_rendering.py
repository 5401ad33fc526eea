"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
processing summaries, and configuration summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import ProcessingResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_result_summary(result: ProcessingResult) -> None:
    """Print record, audio, and error counts for one processed file."""

    typer.echo(f"Source URL: {result.source_url}")
    typer.echo(f"Audio URL: {result.audio_url or '(none)'}")
    typer.echo(f"Records: {len(result.segments)}")
    typer.echo(f"Audio segments appended: {result.appended_count}")
    typer.echo(f"Segments with errors: {result.failed_count}")


def echo_config_summary(summary: dict[str, str]) -> None:
    """Print non-secret configuration values in deterministic key order."""

    for key in sorted(summary):
        typer.echo(f"{key}: {summary[key]}")
