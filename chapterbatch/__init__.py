"""Top-level package for chapterbatch.

This package drives an external audiobook chapterizer over a manifest of audio
files, one file at a time, and publishes the resulting cue sheets and chapter
metadata next to each source file. The main orchestration entry point is
`BatchDriver`.
"""

from .pipeline import BatchDriver

__all__ = ["BatchDriver", "__version__"]

__version__ = "0.1.0"
