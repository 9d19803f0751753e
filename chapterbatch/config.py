"""Configuration model and loaders for chapterbatch.

Responsibilities:
- Define batch runtime configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Apply explicit CLI overrides on top of loaded defaults.

Key types:
- `BatchConfig`: normalized runtime settings for one batch run.
- `ConfigLoader`: static construction helpers for `BatchConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_non_negative_int,
    parse_permissive_boolean,
)


DEFAULT_MANIFEST = Path("chapterize.txt")
DEFAULT_OUTPUT_ROOT = Path("output")
DEFAULT_CHAPTERIZER = "audiobook-chapterizer"
DEFAULT_MODEL_DIR = Path("vosk-model-en-us-0.22")
DEFAULT_VERBOSITY = 2
DEFAULT_BACKTRACE = "full"

CUE_CONTRACT_FLAGS = "flags"
CUE_CONTRACT_POSITIONAL = "positional"
_SUPPORTED_CUE_CONTRACTS = frozenset({CUE_CONTRACT_FLAGS, CUE_CONTRACT_POSITIONAL})


@dataclass(frozen=True, slots=True)
class BatchConfig:
    """Runtime configuration for one batch run.

    Attributes:
        manifest_path: Work-list file, one audio path per line.
        output_root: Directory holding one output subdirectory per item.
        chapterizer: Chapterizer executable name or path.
        model_dir: Speech-recognition model directory passed to the chapterizer.
        verbosity: Number of `-v` flags passed to the chapterizer.
        cue_contract: `flags` (`--output_cue`/`--output_ffmetadata`) or
            `positional` (legacy trailing cue path, no ffmetadata).
        backtrace: Value exported as `RUST_BACKTRACE` for each invocation.
        build_command: Optional command run once before the batch (for example
            `just build`).
        strict: Exit non-zero after the batch when any item failed.
        dry_run: Print planned commands without touching the filesystem.
        extra: Free-form string metadata carried into the batch summary.
    """

    manifest_path: Path = DEFAULT_MANIFEST
    output_root: Path = DEFAULT_OUTPUT_ROOT
    chapterizer: str = DEFAULT_CHAPTERIZER
    model_dir: Path = DEFAULT_MODEL_DIR
    verbosity: int = DEFAULT_VERBOSITY
    cue_contract: str = CUE_CONTRACT_FLAGS
    backtrace: str = DEFAULT_BACKTRACE
    build_command: str | None = None
    strict: bool = False
    dry_run: bool = False
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate field combinations and raise `ValueError` on invalid values."""

        if not self.chapterizer.strip():
            raise ValueError("`chapterizer` must be a non-empty executable name or path.")
        if self.verbosity < 0:
            raise ValueError("`verbosity` must be a non-negative integer.")
        if self.cue_contract not in _SUPPORTED_CUE_CONTRACTS:
            supported = ", ".join(sorted(_SUPPORTED_CUE_CONTRACTS))
            raise ValueError(
                f"`cue_contract` must be one of: {supported} (got `{self.cue_contract}`)."
            )

    @property
    def writes_ffmetadata(self) -> bool:
        """Return whether the chapterizer is asked for an ffmetadata file."""

        return self.cue_contract == CUE_CONTRACT_FLAGS

    def with_overrides(self, **overrides: object) -> BatchConfig:
        """Return a validated copy with non-`None` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        updated = replace(self, **applied)
        updated.validate()
        return updated


class ConfigLoader:
    """Factory methods for building `BatchConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "manifest",
            "output_root",
            "chapterizer",
            "model_dir",
            "verbosity",
            "cue_contract",
            "backtrace",
            "build_command",
            "strict",
            "extra",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> BatchConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> BatchConfig:
        """Create a validated config from `CHAPTERBATCH_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        def _env_string(key: str) -> str | None:
            return normalize_optional_string(env_map.get(key))

        verbosity = DEFAULT_VERBOSITY
        raw_verbosity = _env_string("CHAPTERBATCH_VERBOSITY")
        if raw_verbosity is not None:
            parsed_verbosity = parse_non_negative_int(raw_verbosity)
            if parsed_verbosity is None:
                raise ValueError("`CHAPTERBATCH_VERBOSITY` must be a non-negative integer.")
            verbosity = parsed_verbosity

        strict = False
        raw_strict = _env_string("CHAPTERBATCH_STRICT")
        if raw_strict is not None:
            parsed_strict = parse_permissive_boolean(raw_strict)
            if parsed_strict is None:
                raise ValueError(
                    "`CHAPTERBATCH_STRICT` must be a boolean value "
                    "(`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            strict = parsed_strict

        manifest = _env_string("CHAPTERBATCH_MANIFEST")
        output_root = _env_string("CHAPTERBATCH_OUTPUT_ROOT")
        model_dir = _env_string("CHAPTERBATCH_MODEL_DIR")

        config = BatchConfig(
            manifest_path=Path(manifest) if manifest else DEFAULT_MANIFEST,
            output_root=Path(output_root) if output_root else DEFAULT_OUTPUT_ROOT,
            chapterizer=_env_string("CHAPTERBATCH_CHAPTERIZER") or DEFAULT_CHAPTERIZER,
            model_dir=Path(model_dir) if model_dir else DEFAULT_MODEL_DIR,
            verbosity=verbosity,
            cue_contract=_env_string("CHAPTERBATCH_CUE_CONTRACT") or CUE_CONTRACT_FLAGS,
            backtrace=_env_string("CHAPTERBATCH_BACKTRACE") or DEFAULT_BACKTRACE,
            build_command=_env_string("CHAPTERBATCH_BUILD_COMMAND"),
            strict=strict,
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML `{path}` could not be parsed: {exc}") from exc
        if payload is None:
            return {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML `{path}` must contain a mapping at the top level.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> BatchConfig:
        """Build and validate a config from a parsed mapping payload."""

        ConfigLoader._validate_yaml_keys(payload, source_label)

        manifest = ConfigLoader._optional_non_empty_string(payload, "manifest")
        output_root = ConfigLoader._optional_non_empty_string(payload, "output_root")
        model_dir = ConfigLoader._optional_non_empty_string(payload, "model_dir")

        config = BatchConfig(
            manifest_path=Path(manifest) if manifest else DEFAULT_MANIFEST,
            output_root=Path(output_root) if output_root else DEFAULT_OUTPUT_ROOT,
            chapterizer=(
                ConfigLoader._optional_non_empty_string(payload, "chapterizer")
                or DEFAULT_CHAPTERIZER
            ),
            model_dir=Path(model_dir) if model_dir else DEFAULT_MODEL_DIR,
            verbosity=ConfigLoader._optional_non_negative_int(
                payload, "verbosity", source_label, DEFAULT_VERBOSITY
            ),
            cue_contract=(
                ConfigLoader._optional_non_empty_string(payload, "cue_contract")
                or CUE_CONTRACT_FLAGS
            ),
            backtrace=(
                ConfigLoader._optional_non_empty_string(payload, "backtrace")
                or DEFAULT_BACKTRACE
            ),
            build_command=ConfigLoader._optional_non_empty_string(payload, "build_command"),
            strict=ConfigLoader._optional_boolean(payload, "strict", source_label, False),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        config.validate()
        return config

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Reject keys the loader does not understand."""

        unknown = sorted(
            str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS)
        )
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_non_negative_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a non-negative integer payload field."""

        if key not in payload or normalize_optional_string(payload[key]) is None:
            return default

        parsed = parse_non_negative_int(payload[key])
        if parsed is None:
            raise ValueError(f"{source_label} field `{key}` must be a non-negative integer.")
        return parsed

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default

        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        if key not in payload:
            return {}

        raw = payload[key]
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
