"""Shared pytest fixtures for the chapterbatch test suite."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
import stat
import sys

import pytest

from chapterbatch.telemetry.logger import RunLogger

_FAKE_CHAPTERIZER_SOURCE = '''
import os
import sys
from pathlib import Path

args = sys.argv[1:]


def flag_value(flag):
    if flag in args:
        return args[args.index(flag) + 1]
    return None


input_path = flag_value("-i")
print(f"out-1 chapterizing {input_path}", flush=True)
sys.stderr.write("err-2 model loaded\\n")
sys.stderr.flush()
print(f"out-3 RUST_BACKTRACE={os.environ.get('RUST_BACKTRACE', '')}", flush=True)
print("argv " + " ".join(args), flush=True)

if not Path(input_path).exists():
    sys.stderr.write(f"err-4 input not found: {input_path}\\n")
    sys.exit(2)

Path(flag_value("--write_matches")).write_text('{"text": "chapter one"}\\n', encoding="utf-8")
name = Path(input_path).name
if "fail" in name:
    sys.stderr.write("err-4 panicked while chapterizing\\n")
    sys.exit(101)

cue_path = flag_value("--output_cue") or args[-1]
Path(cue_path).write_text(f'FILE "{name}" MP3\\n  TRACK 01 AUDIO\\n', encoding="utf-8")
ffmetadata_path = flag_value("--output_ffmetadata")
if ffmetadata_path is not None:
    Path(ffmetadata_path).write_text(";FFMETADATA1\\n[CHAPTER]\\nTITLE=Chapter 1\\n", encoding="utf-8")
print("out-5 done", flush=True)
'''


@pytest.fixture
def fake_chapterizer(tmp_path: Path) -> Path:
    """Provide an executable stand-in for the external chapterizer.

    The stand-in prints interleaved stdout/stderr lines, writes the matches,
    cue, and ffmetadata artifacts it is asked for, exits 2 for missing inputs,
    and exits 101 for inputs whose filename contains `fail`.
    """

    tool_dir = tmp_path / "tool"
    tool_dir.mkdir()
    script_path = tool_dir / "fake_chapterizer.py"
    script_path.write_text(_FAKE_CHAPTERIZER_SOURCE, encoding="utf-8")
    launcher = tool_dir / "audiobook-chapterizer"
    launcher.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{script_path}" "$@"\n',
        encoding="utf-8",
    )
    launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return launcher


@pytest.fixture
def log_sink() -> StringIO:
    """Provide a text sink capturing notices and phase lines."""

    return StringIO()


@pytest.fixture
def run_logger(log_sink: StringIO) -> RunLogger:
    """Provide a run logger writing into `log_sink`."""

    return RunLogger(sink=log_sink)


@pytest.fixture
def audio_library(tmp_path: Path) -> Path:
    """Provide a `library/` tree with placeholder audio inputs."""

    library = tmp_path / "library"
    (library / "book").mkdir(parents=True)
    (library / "other").mkdir()
    for relative in ("book/intro.mp3", "book/book.chapter1.mp3", "other/fail_track.wav"):
        (library / relative).write_bytes(b"ID3placeholder")
    return library
