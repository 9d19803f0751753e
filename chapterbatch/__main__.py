"""Module entrypoint for running chapterbatch as ``python -m chapterbatch``."""

from __future__ import annotations

from chapterbatch.cli import main


if __name__ == "__main__":
    main()
