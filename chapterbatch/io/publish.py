"""No-clobber artifact publishing.

Responsibilities:
- Copy one artifact to a destination only when the destination does not exist.
- Report the outcome as `published`, `skipped_existing`, or `failed`.

The destination is opened with exclusive creation, so an existing file is never
truncated or overwritten, even if it appears between check and copy.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from ..models.datatypes import (
    PUBLISH_FAILED,
    PUBLISHED,
    SKIPPED_EXISTING,
    PublishResult,
)


def publish_if_absent(artifact: str, source: Path, destination: Path) -> PublishResult:
    """Copy `source` to `destination` unless `destination` already exists."""

    if destination.exists():
        return PublishResult(artifact, source, destination, SKIPPED_EXISTING)

    try:
        reader = source.open("rb")
    except FileNotFoundError:
        return _failed(artifact, source, destination, f"missing artifact `{source}`")
    except OSError as exc:
        return _failed(
            artifact, source, destination, f"cannot read `{source}`: {exc.strerror or exc}"
        )

    with reader:
        try:
            writer = destination.open("xb")
        except FileExistsError:
            return PublishResult(artifact, source, destination, SKIPPED_EXISTING)
        except OSError as exc:
            return _failed(
                artifact,
                source,
                destination,
                f"cannot create `{destination}`: {exc.strerror or exc}",
            )

        try:
            with writer:
                shutil.copyfileobj(reader, writer)
        except OSError as exc:
            # A partial copy would be mistaken for a published artifact on rerun.
            destination.unlink(missing_ok=True)
            return _failed(
                artifact,
                source,
                destination,
                f"cannot copy to `{destination}`: {exc.strerror or exc}",
            )

    return PublishResult(artifact, source, destination, PUBLISHED)


def _failed(artifact: str, source: Path, destination: Path, reason: str) -> PublishResult:
    return PublishResult(artifact, source, destination, PUBLISH_FAILED, reason=reason)
