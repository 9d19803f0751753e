"""Chapterizer executable resolution helpers.

Responsibilities:
- Resolve external executable paths with deterministic bundled-first precedence.
- Find locally built chapterizer binaries in a cargo `target/` tree.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import sys


def resolve_executable(command_name: str, search_root: Path | None = None) -> str:
    """Resolve an executable name to a launchable path.

    Resolution order:
    1. Names containing a path separator are returned unchanged.
    2. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    3. Local build outputs (`target/release/<tool>` then `target/debug/<tool>`
       under `search_root`, defaulting to the working directory).
    4. System `PATH`.
    5. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name
    if _has_path_separator(normalized):
        return normalized

    for candidate in _local_candidates(normalized, search_root or Path.cwd()):
        if candidate.is_file():
            return str(candidate)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path

    return normalized


def _has_path_separator(command_name: str) -> bool:
    separators = {os.sep} | ({os.altsep} if os.altsep else set())
    return any(separator in command_name for separator in separators)


def _local_candidates(command_name: str, search_root: Path) -> list[Path]:
    """Return deterministic bundled and build-tree candidate paths."""

    app_root = _app_root()
    candidates: list[Path] = []
    for name in _candidate_names(command_name):
        candidates.append(app_root / "bin" / name)
        candidates.append(app_root / name)
    for name in _candidate_names(command_name):
        candidates.append(search_root / "target" / "release" / name)
        candidates.append(search_root / "target" / "debug" / name)
    return candidates


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    if command_name.lower().endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
