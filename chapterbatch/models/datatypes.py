"""Core datatypes shared across chapterbatch modules.

Responsibilities:
- Represent immutable records exchanged between the reader, processor and driver.
- Keep per-item success/failure explicit as return values instead of exceptions.

Key types:
- `ManifestLine`, `WorkItem`, `ChapterizerRun`, `PublishResult`, `ItemOutcome`,
  and `BatchSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..naming import audio_name_for, derive_output_dir

LINE_ENTRY = "entry"
LINE_COMMENT = "comment"
LINE_BLANK = "blank"

PUBLISHED = "published"
SKIPPED_EXISTING = "skipped_existing"
PUBLISH_FAILED = "failed"

ITEM_SUCCEEDED = "succeeded"
ITEM_FAILED = "failed"
ITEM_PLANNED = "planned"


@dataclass(frozen=True, slots=True)
class ManifestLine:
    """One classified line of the manifest file.

    Attributes:
        line_number: 1-based line number in the manifest.
        raw: Line text without the trailing newline.
        kind: `entry`, `comment`, or `blank`.
        text: Trimmed line text; the work entry path for `entry` lines.
    """

    line_number: int
    raw: str
    kind: str
    text: str

    @property
    def is_entry(self) -> bool:
        """Return whether this line names a work item."""

        return self.kind == LINE_ENTRY


@dataclass(frozen=True, slots=True)
class WorkItem:
    """One input audio file and every location derived from it.

    Attributes:
        input_path: Input path exactly as written in the manifest.
        output_root: Root directory holding one subdirectory per item.
    """

    input_path: str
    output_root: Path

    @property
    def audio_name(self) -> str:
        return audio_name_for(self.input_path)

    @property
    def source_dir(self) -> Path:
        return Path(self.input_path).parent

    @property
    def output_dir(self) -> Path:
        return derive_output_dir(self.output_root, self.input_path)

    @property
    def matches_path(self) -> Path:
        return self.output_dir / f"{self.audio_name}.jsonl"

    @property
    def cue_path(self) -> Path:
        return self.output_dir / f"{self.audio_name}.cue"

    @property
    def ffmetadata_path(self) -> Path:
        return self.output_dir / f"{self.audio_name}.ffmetadata"

    @property
    def log_path(self) -> Path:
        return self.output_dir / f"{self.audio_name}.log"

    @property
    def published_cue_path(self) -> Path:
        return self.source_dir / f"{self.audio_name}.cue"

    @property
    def published_ffmetadata_path(self) -> Path:
        return self.source_dir / f"{self.audio_name}.ffmetadata"


@dataclass(frozen=True, slots=True)
class ChapterizerRun:
    """Observed result of one chapterizer subprocess invocation.

    Attributes:
        command: Full argument vector passed to the subprocess.
        exit_code: Process exit status, or `None` when the process never started.
        launch_error: Launch failure description when the process never started.
    """

    command: tuple[str, ...]
    exit_code: int | None
    launch_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def failure_reason(self) -> str | None:
        """Return a short failure description, or `None` for a clean exit."""

        if self.launch_error is not None:
            return f"chapterizer could not be started: {self.launch_error}"
        if self.exit_code != 0:
            return f"chapterizer exited with status {self.exit_code}"
        return None


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Result of publishing one artifact next to its source audio.

    Attributes:
        artifact: Artifact label (`cue` or `ffmetadata`).
        source: Artifact path inside the item output directory.
        destination: Published copy path in the source directory.
        status: `published`, `skipped_existing`, or `failed`.
        reason: Failure description for `failed` results.
    """

    artifact: str
    source: Path
    destination: Path
    status: str
    reason: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == PUBLISH_FAILED


@dataclass(frozen=True, slots=True)
class ItemOutcome:
    """Typed per-item result returned by the item error boundary.

    Attributes:
        item: Processed work item.
        status: `succeeded`, `failed`, or `planned` (dry run).
        reason: Failure descriptions joined in occurrence order.
        run: Chapterizer run record, when the tool was invoked.
        publish_results: Ordered publish results for shareable artifacts.
    """

    item: WorkItem
    status: str
    reason: str | None = None
    run: ChapterizerRun | None = None
    publish_results: tuple[PublishResult, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.status == ITEM_SUCCEEDED


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """Ordered outcomes of one batch run.

    Attributes:
        outcomes: Per-item outcomes in manifest order.
        skipped_comments: Manifest comment lines skipped during the run.
        dry_run: Whether the run only planned commands.
        extra: Free-form metadata copied from the batch configuration.
    """

    outcomes: tuple[ItemOutcome, ...] = field(default_factory=tuple)
    skipped_comments: tuple[str, ...] = field(default_factory=tuple)
    dry_run: bool = False
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed_outcomes())

    def failed_outcomes(self) -> tuple[ItemOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.status == ITEM_FAILED)
