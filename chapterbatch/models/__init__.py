"""Typed records shared across chapterbatch modules."""

from .datatypes import (
    BatchSummary,
    ChapterizerRun,
    ItemOutcome,
    ManifestLine,
    PublishResult,
    WorkItem,
)

__all__ = [
    "BatchSummary",
    "ChapterizerRun",
    "ItemOutcome",
    "ManifestLine",
    "PublishResult",
    "WorkItem",
]
