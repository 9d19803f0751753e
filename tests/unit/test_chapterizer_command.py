"""Unit tests for the chapterizer argument contract and environment."""

from __future__ import annotations

from pathlib import Path

from chapterbatch.chapterizer.command import (
    build_chapterizer_command,
    chapterizer_environment,
    verbosity_flag,
)
from chapterbatch.config import BatchConfig
from chapterbatch.models.datatypes import WorkItem


def _item() -> WorkItem:
    return WorkItem(input_path="./book/intro.mp3", output_root=Path("output"))


def test_flag_contract_requests_cue_and_ffmetadata() -> None:
    """Default contract passes explicit cue and ffmetadata output flags."""

    config = BatchConfig(model_dir=Path("vosk-model-en-us-0.22"))

    command = build_chapterizer_command(_item(), config, "/opt/bin/audiobook-chapterizer")

    assert command == (
        "/opt/bin/audiobook-chapterizer",
        "-vv",
        "--model",
        "vosk-model-en-us-0.22",
        "--write_matches",
        str(Path("output/intro/intro.jsonl")),
        "-i",
        "./book/intro.mp3",
        "--output_cue",
        str(Path("output/intro/intro.cue")),
        "--output_ffmetadata",
        str(Path("output/intro/intro.ffmetadata")),
    )


def test_positional_contract_appends_bare_cue_path() -> None:
    """Legacy contract passes the cue path positionally and no ffmetadata flag."""

    config = BatchConfig(cue_contract="positional", verbosity=1)

    command = build_chapterizer_command(_item(), config, "chapterizer")

    assert command[1] == "-v"
    assert command[-1] == str(Path("output/intro/intro.cue"))
    assert "--output_cue" not in command
    assert "--output_ffmetadata" not in command


def test_verbosity_flag_clusters_v_and_omits_zero() -> None:
    """Verbosity maps to a single short-flag cluster."""

    assert verbosity_flag(0) is None
    assert verbosity_flag(1) == "-v"
    assert verbosity_flag(3) == "-vvv"

    command = build_chapterizer_command(_item(), BatchConfig(verbosity=0), "chapterizer")
    assert command[1] == "--model"


def test_chapterizer_environment_requests_full_backtraces() -> None:
    """The subprocess environment keeps base values and sets `RUST_BACKTRACE`."""

    env = chapterizer_environment("full", base={"PATH": "/usr/bin", "RUST_BACKTRACE": "0"})

    assert env == {"PATH": "/usr/bin", "RUST_BACKTRACE": "full"}
