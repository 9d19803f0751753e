"""Chapterizer argument contract.

Responsibilities:
- Build the fixed argument vector for one chapterizer invocation.
- Build the subprocess environment requesting full diagnostic backtraces.
"""

from __future__ import annotations

from collections.abc import Mapping
import os

from ..config import CUE_CONTRACT_POSITIONAL, BatchConfig
from ..models.datatypes import WorkItem

_MATCHES_SUFFIX = ".jsonl"


def verbosity_flag(verbosity: int) -> str | None:
    """Return the short `-v` flag cluster, or `None` for default verbosity."""

    if verbosity <= 0:
        return None
    return "-" + "v" * verbosity


def build_chapterizer_command(
    item: WorkItem,
    config: BatchConfig,
    executable: str,
) -> tuple[str, ...]:
    """Return the argument vector for chapterizing one work item."""

    if item.matches_path.suffix != _MATCHES_SUFFIX:
        raise ValueError(f"Matches path must end in {_MATCHES_SUFFIX}: {item.matches_path}")

    command: list[str] = [executable]
    flag = verbosity_flag(config.verbosity)
    if flag is not None:
        command.append(flag)
    command.extend(
        [
            "--model",
            str(config.model_dir),
            "--write_matches",
            str(item.matches_path),
            "-i",
            item.input_path,
        ]
    )
    if config.cue_contract == CUE_CONTRACT_POSITIONAL:
        command.append(str(item.cue_path))
    else:
        command.extend(
            [
                "--output_cue",
                str(item.cue_path),
                "--output_ffmetadata",
                str(item.ffmetadata_path),
            ]
        )
    return tuple(command)


def chapterizer_environment(
    backtrace: str,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the subprocess environment with `RUST_BACKTRACE` set."""

    env = dict(os.environ if base is None else base)
    env["RUST_BACKTRACE"] = backtrace
    return env
