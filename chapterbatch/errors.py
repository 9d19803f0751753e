"""Domain exceptions for batch-level diagnostics."""

from __future__ import annotations


class BatchStageError(RuntimeError):
    """Raised when a batch-level stage fails and the whole run must stop.

    Per-item failures are never raised as this type; they are returned as
    failed `ItemOutcome` records so the batch can continue.
    """

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped batch error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
