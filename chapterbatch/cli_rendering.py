"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
batch summaries, and manifest plans.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import NoReturn

import typer

from .errors import BatchStageError
from .models.datatypes import LINE_COMMENT, BatchSummary, ManifestLine
from .naming import derive_output_dir


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, BatchStageError):
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


def echo_batch_summary(summary: BatchSummary) -> None:
    """Print aggregate item counts and one row per failed item."""

    if summary.dry_run:
        typer.echo(f"Planned {summary.total_count} item(s); nothing was run.")
        return

    typer.echo(
        f"Processed {summary.total_count} item(s): "
        f"{summary.succeeded_count} succeeded, {summary.failed_count} failed."
    )
    for outcome in summary.failed_outcomes():
        typer.secho(
            f"  failed: {outcome.item.input_path} ({outcome.reason})",
            fg=typer.colors.RED,
        )


def echo_manifest_plan(lines: Iterable[ManifestLine], output_root: Path) -> None:
    """Print each work entry with its output directory, and each skipped comment."""

    entry_count = 0
    for line in lines:
        if line.kind == LINE_COMMENT:
            typer.echo(f"skip  line {line.line_number}: {line.text}")
        elif line.is_entry:
            entry_count += 1
            typer.echo(f"{entry_count}. {line.text} -> {derive_output_dir(output_root, line.text)}")
    typer.echo(f"{entry_count} work item(s).")
