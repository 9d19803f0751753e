"""Command-line interface for chapterbatch.

Responsibilities:
- Expose user-facing commands for running and planning a chapterizer batch.
- Convert CLI arguments into `BatchConfig` on top of YAML or environment defaults.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_batch_summary, echo_manifest_plan, exit_with_command_error
from .config import BatchConfig, ConfigLoader
from .errors import BatchStageError
from .io.work_list import WorkList
from .pipeline import BatchDriver
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="chapterbatch",
    no_args_is_help=True,
    help="Run the audiobook chapterizer over a manifest of audio files.",
)


def _load_base_config(config_path: Path | None) -> BatchConfig:
    """Load YAML defaults when requested, else environment defaults."""

    try:
        if config_path is None:
            return ConfigLoader.from_env()
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise BatchStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        source = f"config file `{config_path}`" if config_path else "environment config"
        raise BatchStageError(
            stage="config",
            detail=f"Invalid {source}: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise BatchStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _resolve_config(config_path: Path | None, **overrides: object) -> BatchConfig:
    """Apply explicit CLI overrides on top of loaded defaults."""

    base = _load_base_config(config_path)
    try:
        return base.with_overrides(**overrides)
    except ValueError as exc:
        raise BatchStageError(
            stage="config",
            detail=f"Invalid command options: {exc}",
            hint="Run with `--help` to list accepted values.",
        ) from exc


ManifestArgument = Annotated[
    Path | None,
    typer.Argument(
        help="Work-list file, one audio path per line (`#` starts a comment).",
        show_default=False,
    ),
]
OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output root; each item gets `<out>/<audio_name>/`."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]


@app.command("run")
def run_command(
    manifest: ManifestArgument = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    chapterizer: Annotated[
        str | None,
        typer.Option("--chapterizer", help="Chapterizer executable name or path."),
    ] = None,
    model_dir: Annotated[
        Path | None,
        typer.Option("--model", help="Speech-recognition model directory."),
    ] = None,
    verbosity: Annotated[
        int | None,
        typer.Option(
            "--verbosity",
            min=0,
            help="Number of `-v` flags passed to the chapterizer (default 2).",
        ),
    ] = None,
    cue_contract: Annotated[
        str | None,
        typer.Option(
            "--cue-contract",
            help="`flags` (cue + ffmetadata) or legacy `positional` (cue only).",
        ),
    ] = None,
    build_command: Annotated[
        str | None,
        typer.Option(
            "--build-command",
            help="Command run once before the batch, for example `just build`.",
        ),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option(
            "--strict/--no-strict",
            help="Exit with code 1 after the batch when any item failed.",
            show_default=False,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print planned commands without running them."),
    ] = False,
) -> None:
    """Chapterize every manifest entry, continuing past per-item failures."""

    try:
        config = _resolve_config(
            config_file,
            manifest_path=manifest,
            output_root=out,
            chapterizer=chapterizer,
            model_dir=model_dir,
            verbosity=verbosity,
            cue_contract=cue_contract,
            build_command=build_command,
            strict=strict,
            dry_run=dry_run or None,
        )
        summary = BatchDriver(config, logger=RunLogger()).run()
    except Exception as exc:
        exit_with_command_error("run", exc)

    echo_batch_summary(summary)
    if config.strict and summary.failed_count > 0:
        typer.secho(
            f"{summary.failed_count} item(s) failed; exiting with status 1 (--strict).",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)


@app.command("plan")
def plan_command(
    manifest: ManifestArgument = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
) -> None:
    """List manifest entries and the output directory each one would use."""

    try:
        config = _resolve_config(config_file, manifest_path=manifest, output_root=out)
        echo_manifest_plan(WorkList(config.manifest_path).lines(), config.output_root)
    except Exception as exc:
        exit_with_command_error("plan", exc)


def main() -> None:
    """CLI entrypoint for console scripts."""

    app()


if __name__ == "__main__":
    main()
