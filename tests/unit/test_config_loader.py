"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from chapterbatch.config import BatchConfig, ConfigLoader


def test_batch_config_defaults_follow_flag_contract() -> None:
    """Defaults target the flag-based contract with `-vv` and full backtraces."""

    config = BatchConfig()

    assert config.manifest_path == Path("chapterize.txt")
    assert config.output_root == Path("output")
    assert config.verbosity == 2
    assert config.cue_contract == "flags"
    assert config.backtrace == "full"
    assert config.writes_ffmetadata
    assert config.strict is False


def test_config_loader_from_yaml_loads_and_normalizes_values(tmp_path: Path) -> None:
    """YAML loader should parse valid payloads and normalize blank/typed values."""

    config_path = tmp_path / "chapterbatch.yml"
    config_path.write_text(
        """
manifest: " books.txt "
output_root: " out "
chapterizer: " ./target/release/audiobook-chapterizer "
model_dir: " models/vosk "
verbosity: " 3 "
cue_contract: positional
backtrace: "1"
build_command: " just build "
strict: " yes "
extra:
  shelf: " fiction "
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.manifest_path == Path("books.txt")
    assert config.output_root == Path("out")
    assert config.chapterizer == "./target/release/audiobook-chapterizer"
    assert config.model_dir == Path("models/vosk")
    assert config.verbosity == 3
    assert config.cue_contract == "positional"
    assert not config.writes_ffmetadata
    assert config.backtrace == "1"
    assert config.build_command == "just build"
    assert config.strict is True
    assert config.extra == {"shelf": "fiction"}


def test_config_loader_from_yaml_empty_file_uses_defaults(tmp_path: Path) -> None:
    """An empty YAML document yields the default configuration."""

    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == BatchConfig()


def test_config_loader_from_yaml_rejects_unknown_keys_and_bad_values(tmp_path: Path) -> None:
    """YAML loader should fail clearly on unknown fields and invalid values."""

    unknown_path = tmp_path / "unknown.yml"
    unknown_path.write_text("manifest: list.txt\nparallel: 4\n", encoding="utf-8")
    with pytest.raises(ValueError, match=r"unsupported key\(s\): parallel"):
        ConfigLoader.from_yaml(unknown_path)

    contract_path = tmp_path / "contract.yml"
    contract_path.write_text("cue_contract: stdout\n", encoding="utf-8")
    with pytest.raises(ValueError, match="`cue_contract` must be one of"):
        ConfigLoader.from_yaml(contract_path)

    verbosity_path = tmp_path / "verbosity.yml"
    verbosity_path.write_text("verbosity: -1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="`verbosity` must be a non-negative integer"):
        ConfigLoader.from_yaml(verbosity_path)

    strict_path = tmp_path / "strict.yml"
    strict_path.write_text("strict: maybe\n", encoding="utf-8")
    with pytest.raises(ValueError, match="`strict` must be a boolean"):
        ConfigLoader.from_yaml(strict_path)


def test_config_loader_from_yaml_rejects_non_mapping_root(tmp_path: Path) -> None:
    """A YAML list at the top level is not a config."""

    config_path = tmp_path / "list.yml"
    config_path.write_text("- a.mp3\n- b.mp3\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_env_loads_values_and_ignores_blanks() -> None:
    """Environment loader should parse `CHAPTERBATCH_*` keys and skip blanks."""

    config = ConfigLoader.from_env(
        {
            "CHAPTERBATCH_MANIFEST": " books.txt ",
            "CHAPTERBATCH_OUTPUT_ROOT": " out ",
            "CHAPTERBATCH_CHAPTERIZER": "chapterizer-nightly",
            "CHAPTERBATCH_MODEL_DIR": "   ",
            "CHAPTERBATCH_VERBOSITY": "0",
            "CHAPTERBATCH_STRICT": "true",
            "CHAPTERBATCH_BUILD_COMMAND": "",
        }
    )

    assert config.manifest_path == Path("books.txt")
    assert config.output_root == Path("out")
    assert config.chapterizer == "chapterizer-nightly"
    assert config.model_dir == Path("vosk-model-en-us-0.22")
    assert config.verbosity == 0
    assert config.strict is True
    assert config.build_command is None


def test_config_loader_from_env_rejects_invalid_values() -> None:
    """Environment loader should fail clearly for invalid typed values."""

    with pytest.raises(ValueError, match="`CHAPTERBATCH_VERBOSITY` must be"):
        ConfigLoader.from_env({"CHAPTERBATCH_VERBOSITY": "loud"})
    with pytest.raises(ValueError, match="`CHAPTERBATCH_STRICT` must be a boolean"):
        ConfigLoader.from_env({"CHAPTERBATCH_STRICT": "sometimes"})


def test_with_overrides_applies_only_explicit_values() -> None:
    """`None` overrides keep loaded defaults; explicit values replace them."""

    base = BatchConfig(output_root=Path("from-yaml"), verbosity=1)

    updated = base.with_overrides(output_root=None, verbosity=3, strict=True)

    assert updated.output_root == Path("from-yaml")
    assert updated.verbosity == 3
    assert updated.strict is True
    with pytest.raises(ValueError, match="`cue_contract` must be one of"):
        base.with_overrides(cue_contract="bogus")
