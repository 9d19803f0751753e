"""Manifest (work-list) reading.

Responsibilities:
- Classify raw manifest lines as work entries, comments, or blanks.
- Lazily yield work entries in file order, re-reading the file on every iteration.

The reader never checks that listed paths exist; missing inputs surface later as
per-item chapterizer failures.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TextIO

from ..errors import BatchStageError
from ..models.datatypes import LINE_BLANK, LINE_COMMENT, LINE_ENTRY, ManifestLine

_COMMENT_PREFIX = "#"


def classify_manifest_line(raw: str, line_number: int) -> ManifestLine:
    """Classify one manifest line.

    Surrounding whitespace and line terminators are trimmed before
    classification; a trimmed line starting with `#` is a comment.
    """

    stripped_raw = raw.rstrip("\r\n")
    text = stripped_raw.strip()
    if not text:
        kind = LINE_BLANK
    elif text.startswith(_COMMENT_PREFIX):
        kind = LINE_COMMENT
    else:
        kind = LINE_ENTRY
    return ManifestLine(line_number=line_number, raw=stripped_raw, kind=kind, text=text)


class WorkList:
    """Restartable, lazy view over the work entries of a manifest file."""

    def __init__(
        self,
        path: Path,
        on_comment: Callable[[ManifestLine], None] | None = None,
    ) -> None:
        """Initialize the view; the file is opened only when iterated."""

        self.path = path
        self._on_comment = on_comment

    def __iter__(self) -> Iterator[str]:
        """Open the manifest and return an iterator over work entry paths.

        The file is opened eagerly so an unreadable manifest fails before the
        first item is processed.
        """

        return self._entries(self.lines())

    def _entries(self, lines: Iterator[ManifestLine]) -> Iterator[str]:
        for line in lines:
            if line.kind == LINE_COMMENT:
                if self._on_comment is not None:
                    self._on_comment(line)
                continue
            if line.is_entry:
                yield line.text

    def lines(self) -> Iterator[ManifestLine]:
        """Open the manifest and return an iterator over classified lines."""

        try:
            handle = self.path.open("r", encoding="utf-8")
        except OSError as exc:
            raise BatchStageError(
                stage="manifest",
                detail=f"Cannot read manifest `{self.path}`: {exc.strerror or exc}.",
                hint="Pass an existing, readable work-list file.",
            ) from exc
        return self._classified(handle)

    def _classified(self, handle: TextIO) -> Iterator[ManifestLine]:
        with handle:
            try:
                for line_number, raw in enumerate(handle, start=1):
                    yield classify_manifest_line(raw, line_number)
            except UnicodeDecodeError as exc:
                raise BatchStageError(
                    stage="manifest",
                    detail=f"Manifest `{self.path}` is not valid UTF-8: {exc.reason}.",
                    hint="Save the work list as UTF-8 text, one path per line.",
                ) from exc
