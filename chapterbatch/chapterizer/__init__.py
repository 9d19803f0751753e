"""External chapterizer integration.

This package builds the chapterizer argument contract and runs the tool with its
combined output teed to a per-item log file.
"""

from .command import build_chapterizer_command, chapterizer_environment
from .runner import run_with_tee

__all__ = ["build_chapterizer_command", "chapterizer_environment", "run_with_tee"]
