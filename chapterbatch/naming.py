"""Pure naming helpers for per-item output locations.

Responsibilities:
- Strip the final extension from an audio filename textually.
- Derive the per-item output directory from the output root and input path.

These helpers never touch the filesystem, so the same input always maps to the
same output location across runs.
"""

from __future__ import annotations

from pathlib import Path, PurePath


def strip_final_extension(filename: str) -> str:
    """Remove everything after the last dot of a filename.

    Edge cases:
    - `book.chapter1.mp3` becomes `book.chapter1` (only the final extension goes).
    - `intro` has no dot and is returned unchanged.
    - `.intro` is a hidden file, not an extension; it is returned unchanged.
    - `.intro.mp3` becomes `.intro`.
    - `intro.` becomes `intro`.
    """

    dot_index = filename.rfind(".")
    if dot_index <= 0:
        return filename
    return filename[:dot_index]


def audio_name_for(input_path: str | PurePath) -> str:
    """Return the extension-stripped basename of an input audio path."""

    return strip_final_extension(PurePath(input_path).name)


def derive_output_dir(output_root: str | PurePath, input_path: str | PurePath) -> Path:
    """Return `<output_root>/<audio_name>` for one input audio path."""

    return Path(output_root) / audio_name_for(input_path)
