"""Run logging utilities.

Responsibilities:
- Emit the human-readable per-item notices of a batch run.
- Emit concise, deterministic phase-level lines for stage and item events.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit notices and phase lines for CLI-observable batch activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize the logger sink with plain, uncolored message formatting."""

        self._sink = sink or sys.stdout
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level, colorize=False)

    def notice(self, message: str) -> None:
        """Emit one plain informational line."""

        _loguru_logger.info(message)

    def warning(self, message: str) -> None:
        """Emit one plain warning line."""

        _loguru_logger.warning(message)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured phase line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a stage-failure event without raw exception payload."""

        self._emit("ERROR", "failure", stage, error_type=error_type, **context)

    def log_publish(self, artifact: str, status: str, **context: object) -> None:
        """Emit a publish-result event for one shareable artifact."""

        level = "ERROR" if status == "failed" else "INFO"
        self._emit(level, status, "publish", artifact=artifact, **context)
