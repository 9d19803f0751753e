"""Batch orchestration for chapterbatch.

Responsibilities:
- Read the manifest and run every work entry strictly in manifest order.
- Contain per-item failures so later entries still run.
- Let batch-level `BatchStageError` failures propagate and stop the run.
- Persist an aggregate batch summary under the output root.

Key types:
- `BatchDriver`: manifest loop with a per-item error boundary.
"""

from __future__ import annotations

from pathlib import Path
import shlex
import subprocess
import sys
from typing import TextIO

from ..config import BatchConfig
from ..errors import BatchStageError
from ..io.storage import SUMMARY_FILENAME, ArtifactStore
from ..io.work_list import WorkList
from ..models.datatypes import (
    ITEM_FAILED,
    ITEM_PLANNED,
    BatchSummary,
    ItemOutcome,
    ManifestLine,
    WorkItem,
)
from ..telemetry.logger import RunLogger
from .processor import ItemProcessor


class BatchDriver:
    """Run the chapterizer over every manifest entry, one item at a time."""

    def __init__(
        self,
        config: BatchConfig,
        logger: RunLogger | None = None,
        stream: TextIO | None = None,
        processor: ItemProcessor | None = None,
    ) -> None:
        """Initialize the driver with config, log sinks, and an item processor."""

        self._config = config
        self._logger = logger if logger is not None else RunLogger()
        self._stream = stream
        self._processor = (
            processor
            if processor is not None
            else ItemProcessor(config, self._logger, stream=stream)
        )
        self._skipped_comments: list[str] = []

    def run(self) -> BatchSummary:
        """Process the whole manifest and return the ordered batch summary.

        Raises:
            BatchStageError: For batch-level failures (unreadable manifest,
                failed build step, output root that cannot be created,
                batch summary that cannot be written).
        """

        self._skipped_comments = []
        entries = iter(WorkList(self._config.manifest_path, on_comment=self._on_comment))

        self._run_build_step()
        if not self._config.dry_run:
            self._prepare_output_root()

        self._logger.log_stage_start("batch", manifest=self._config.manifest_path)
        outcomes: list[ItemOutcome] = []
        claimed_output_dirs: dict[Path, str] = {}
        for entry in entries:
            item = WorkItem(input_path=entry, output_root=self._config.output_root)
            self._warn_on_shared_output_dir(item, claimed_output_dirs)
            if self._config.dry_run:
                outcomes.append(self.plan_item(item))
            else:
                outcomes.append(self.process_item(item))

        summary = BatchSummary(
            outcomes=tuple(outcomes),
            skipped_comments=tuple(self._skipped_comments),
            dry_run=self._config.dry_run,
            extra=dict(self._config.extra),
        )
        if not self._config.dry_run:
            self._save_summary(summary)
        self._logger.log_stage_complete(
            "batch",
            total=summary.total_count,
            succeeded=summary.succeeded_count,
            failed=summary.failed_count,
        )
        return summary

    def process_item(self, item: WorkItem) -> ItemOutcome:
        """Run one item inside the per-item error boundary."""

        self._logger.log_stage_start("item", input=item.input_path)
        try:
            outcome = self._processor.process(item)
        except BatchStageError:
            raise
        except Exception as exc:
            self._logger.log_stage_failure("item", type(exc).__name__, input=item.input_path)
            self._logger.warning(f"Failed chapterizing {item.input_path}: {exc}")
            return ItemOutcome(
                item=item,
                status=ITEM_FAILED,
                reason=f"{type(exc).__name__}: {exc}",
            )

        if outcome.succeeded:
            self._logger.log_stage_complete("item", input=item.input_path)
        else:
            self._logger.log_stage_failure("item", "ItemFailure", input=item.input_path)
            self._logger.warning(f"Failed chapterizing {item.input_path}: {outcome.reason}")
        return outcome

    def plan_item(self, item: WorkItem) -> ItemOutcome:
        """Announce the command one item would run, without side effects."""

        command = self._processor.command_for(item)
        self._logger.notice(f"Chapterizing {item.input_path}")
        self._logger.notice(f"Output dir: {item.output_dir}")
        self._logger.notice(f"Would run: {shlex.join(command)}")
        return ItemOutcome(item=item, status=ITEM_PLANNED)

    def _on_comment(self, line: ManifestLine) -> None:
        self._skipped_comments.append(line.text)
        self._logger.notice(f"Skipping comment: {line.text}")

    def _warn_on_shared_output_dir(self, item: WorkItem, claimed: dict[Path, str]) -> None:
        owner = claimed.setdefault(item.output_dir, item.input_path)
        if owner != item.input_path:
            self._logger.warning(
                f"Output dir {item.output_dir} is shared by {owner} and {item.input_path}; "
                "artifacts of the later item replace the earlier ones."
            )

    def _run_build_step(self) -> None:
        build_command = self._config.build_command
        if build_command is None:
            return

        argv = shlex.split(build_command)
        if self._config.dry_run:
            self._logger.notice(f"Would build: {shlex.join(argv)}")
            return

        self._logger.log_stage_start("build", command=argv[0])
        stream = self._stream or sys.stdout
        stream.flush()
        try:
            result = subprocess.run(argv, check=False)
        except OSError as exc:
            self._logger.log_stage_failure("build", type(exc).__name__)
            raise BatchStageError(
                stage="build",
                detail=f"Build command `{build_command}` could not be started: {exc}.",
                hint="Install the build tool or drop `--build-command`.",
            ) from exc
        if result.returncode != 0:
            self._logger.log_stage_failure("build", "NonZeroExit", returncode=result.returncode)
            raise BatchStageError(
                stage="build",
                detail=(
                    f"Build command `{build_command}` exited with status {result.returncode}."
                ),
                hint="Fix the chapterizer build before running the batch.",
            )
        self._logger.log_stage_complete("build")

    def _prepare_output_root(self) -> None:
        try:
            self._config.output_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BatchStageError(
                stage="output",
                detail=(
                    f"Cannot create output root `{self._config.output_root}`: "
                    f"{exc.strerror or exc}."
                ),
                hint="Pass a writable directory via `--out`.",
            ) from exc

    def _save_summary(self, summary: BatchSummary) -> None:
        try:
            path = ArtifactStore(self._config.output_root).save_summary(summary)
        except OSError as exc:
            self._logger.log_stage_failure("summary", type(exc).__name__)
            raise BatchStageError(
                stage="summary",
                detail=f"Cannot write batch summary under `{self._config.output_root}`: {exc}.",
                hint=(
                    f"Remove or rename whatever occupies `{SUMMARY_FILENAME}` in the output root,"
                    " for example the output dir of an input with that name."
                ),
            ) from exc
        self._logger.notice(f"Batch summary: {path}")
