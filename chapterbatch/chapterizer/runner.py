"""Chapterizer subprocess execution with live log capture.

Responsibilities:
- Launch one external process with stderr merged into stdout.
- Relay the combined stream live to a text stream while writing it verbatim to a
  log file, preserving the order in which the process produced it.
- Report launch failures and exit codes as a typed `ChapterizerRun`.
"""

from __future__ import annotations

import codecs
from collections.abc import Mapping, Sequence
from pathlib import Path
import subprocess
from typing import BinaryIO, TextIO

from ..models.datatypes import ChapterizerRun

_READ_CHUNK_BYTES = 8192


def run_with_tee(
    command: Sequence[str],
    log_path: Path,
    stream: TextIO,
    env: Mapping[str, str] | None = None,
) -> ChapterizerRun:
    """Run `command`, tee its combined output, and return the observed result.

    The log file is truncated at the start of each run. Launch failures are
    written to the log file and the stream, then reported instead of raised.
    """

    command_tuple = tuple(command)
    with log_path.open("wb") as log_file:
        try:
            process = subprocess.Popen(
                command_tuple,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                env=None if env is None else dict(env),
            )
        except OSError as exc:
            detail = f"{exc.strerror or exc}: {command_tuple[0]}"
            message = f"Failed to start chapterizer: {detail}\n"
            log_file.write(message.encode("utf-8"))
            stream.write(message)
            stream.flush()
            return ChapterizerRun(command=command_tuple, exit_code=None, launch_error=detail)

        with process:
            try:
                _relay(process, log_file, stream)
            except BaseException:
                process.kill()
                raise
            exit_code = process.wait()

    return ChapterizerRun(command=command_tuple, exit_code=exit_code)


def _relay(process: subprocess.Popen[bytes], log_file: BinaryIO, stream: TextIO) -> None:
    """Copy process output to the log file and stream until EOF.

    Streams backed by a binary buffer receive the raw bytes, so output the
    terminal encoding cannot represent never interrupts the relay.
    """

    assert process.stdout is not None
    stream.flush()
    raw_stream: BinaryIO | None = getattr(stream, "buffer", None)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = process.stdout.read1(_READ_CHUNK_BYTES)
        if not chunk:
            break
        log_file.write(chunk)
        log_file.flush()
        if raw_stream is not None:
            raw_stream.write(chunk)
            raw_stream.flush()
        else:
            stream.write(decoder.decode(chunk))
            stream.flush()
    if raw_stream is None:
        tail = decoder.decode(b"", final=True)
        if tail:
            stream.write(tail)
            stream.flush()
