"""Batch summary storage.

Responsibilities:
- Persist the batch summary as deterministic JSON under the output root.
- Serialize typed outcome records in manifest order.
"""

from __future__ import annotations

import json
from pathlib import Path

from ..models.datatypes import BatchSummary, ItemOutcome

SUMMARY_FILENAME = "batch_summary.json"


def outcome_payload(outcome: ItemOutcome) -> dict[str, object]:
    """Serialize one item outcome into a JSON-compatible mapping."""

    run = outcome.run
    return {
        "input_path": outcome.item.input_path,
        "audio_name": outcome.item.audio_name,
        "output_dir": str(outcome.item.output_dir),
        "status": outcome.status,
        "reason": outcome.reason,
        "exit_code": run.exit_code if run is not None else None,
        "command": list(run.command) if run is not None else [],
        "publish": [
            {
                "artifact": result.artifact,
                "destination": str(result.destination),
                "status": result.status,
                "reason": result.reason,
            }
            for result in outcome.publish_results
        ],
    }


def summary_payload(summary: BatchSummary) -> dict[str, object]:
    """Serialize a batch summary into a JSON-compatible mapping."""

    return {
        "total": summary.total_count,
        "succeeded": summary.succeeded_count,
        "failed": summary.failed_count,
        "skipped_comments": list(summary.skipped_comments),
        "extra": dict(summary.extra),
        "items": [outcome_payload(outcome) for outcome in summary.outcomes],
    }


class ArtifactStore:
    """Filesystem-backed store for run-level artifacts under the output root."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with the batch output root."""

        self.root = root

    def save_json(self, relative_path: Path, payload: dict[str, object]) -> Path:
        """Save JSON-serializable payload and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return path

    def save_summary(self, summary: BatchSummary) -> Path:
        """Persist the batch summary and return its path."""

        return self.save_json(Path(SUMMARY_FILENAME), summary_payload(summary))

    def load_json(self, relative_path: Path) -> dict[str, object]:
        """Load a JSON mapping from the store."""

        return json.loads((self.root / relative_path).read_text(encoding="utf-8"))
