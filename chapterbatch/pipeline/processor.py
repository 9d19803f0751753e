"""Per-item chapterizer processing.

Responsibilities:
- Create the item output directory and announce the item.
- Run the chapterizer with its combined output teed into the item log.
- Publish the cue sheet and chapter metadata beside the source, no-clobber.

Key types:
- `ItemProcessor`: runs one `WorkItem` and returns an `ItemOutcome`.
"""

from __future__ import annotations

import sys
from typing import TextIO

from ..chapterizer import build_chapterizer_command, chapterizer_environment, run_with_tee
from ..config import BatchConfig
from ..errors import BatchStageError
from ..io.publish import publish_if_absent
from ..models.datatypes import (
    ITEM_FAILED,
    ITEM_SUCCEEDED,
    SKIPPED_EXISTING,
    ItemOutcome,
    PublishResult,
    WorkItem,
)
from ..runtime_tools import resolve_executable
from ..telemetry.logger import RunLogger


class ItemProcessor:
    """Run the chapterizer for one input and land its artifacts."""

    def __init__(
        self,
        config: BatchConfig,
        logger: RunLogger,
        stream: TextIO | None = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self._stream = stream
        self._executable: str | None = None

    @property
    def executable(self) -> str:
        """Resolved chapterizer executable, looked up once per processor."""

        if self._executable is None:
            self._executable = resolve_executable(self._config.chapterizer)
        return self._executable

    def command_for(self, item: WorkItem) -> tuple[str, ...]:
        return build_chapterizer_command(item, self._config, self.executable)

    def process(self, item: WorkItem) -> ItemOutcome:
        """Chapterize one item and publish its shareable artifacts.

        Raises:
            BatchStageError: When the item output directory cannot be created.
        """

        self._prepare_output_dir(item)
        self._logger.notice(f"Chapterizing {item.input_path}")
        self._logger.notice(f"Output dir: {item.output_dir}")

        run = run_with_tee(
            self.command_for(item),
            item.log_path,
            self._stream or sys.stdout,
            env=chapterizer_environment(self._config.backtrace),
        )

        # Published unconditionally: the chapterizer may leave partial artifacts on failure.
        publish_results = self._publish(item)

        reasons: list[str] = []
        run_failure = run.failure_reason()
        if run_failure is not None:
            reasons.append(run_failure)
        reasons.extend(
            f"{result.artifact} not published: {result.reason}"
            for result in publish_results
            if result.failed
        )

        self._logger.notice(f"Done chapterizing {item.input_path}")
        return ItemOutcome(
            item=item,
            status=ITEM_FAILED if reasons else ITEM_SUCCEEDED,
            reason="; ".join(reasons) if reasons else None,
            run=run,
            publish_results=publish_results,
        )

    def _prepare_output_dir(self, item: WorkItem) -> None:
        try:
            item.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BatchStageError(
                stage="output",
                detail=(
                    f"Cannot create output directory `{item.output_dir}`: "
                    f"{exc.strerror or exc}."
                ),
                hint="Verify the output root is writable.",
            ) from exc

    def _publish(self, item: WorkItem) -> tuple[PublishResult, ...]:
        targets = [("cue", item.cue_path, item.published_cue_path)]
        if self._config.writes_ffmetadata:
            targets.append(("ffmetadata", item.ffmetadata_path, item.published_ffmetadata_path))

        results: list[PublishResult] = []
        for artifact, source, destination in targets:
            result = publish_if_absent(artifact, source, destination)
            if result.status != SKIPPED_EXISTING:
                self._logger.log_publish(
                    artifact,
                    result.status,
                    input=item.input_path,
                    destination=destination,
                )
            results.append(result)
        return tuple(results)
