"""Configuration loading for statement sessions."""

from __future__ import annotations

from pathlib import Path

import pytest

from sigunify.driver import session
from sigunify.driver.types import SessionConfig
from sigunify.dsl.grammar import ParserOptions
from sigunify.utils.config import load_config


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_load_config_requires_mapping_root(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- parser\n- diagnostics\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_load_config_rejects_broken_yaml(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("parser: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="failed to parse"):
        load_config(path)


def test_empty_document_is_empty_mapping(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == {}


def test_shipped_defaults_match_dataclass_defaults() -> None:
    assert session.DEFAULT_CONFIG_PATH.exists()
    assert session.load_configuration(session.DEFAULT_CONFIG_PATH) == SessionConfig()


def test_overrides_are_merged_over_file(tmp_path: Path) -> None:
    path = tmp_path / "session.yaml"
    path.write_text("parser:\n  require_declarations: true\n", encoding="utf-8")

    config = session.load_configuration(path, overrides={"parser": {"strict_arguments": True}})

    assert config.parser == ParserOptions(strict_arguments=True, require_declarations=True)
    assert config.diagnostics.report_success is True


def test_from_mapping_coerces_strings() -> None:
    config = SessionConfig.from_mapping(
        {"parser": {"strict_arguments": "yes"}, "diagnostics": {"report_success": "off"}}
    )
    assert config.parser.strict_arguments is True
    assert config.diagnostics.report_success is False


def test_from_mapping_ignores_unexpected_sections() -> None:
    config = SessionConfig.from_mapping({"parser": "strict", "extra": 1})
    assert config == SessionConfig()


def test_to_dict_round_trips() -> None:
    config = SessionConfig.from_mapping({"parser": {"require_declarations": True}})
    assert SessionConfig.from_mapping(config.to_dict()) == config
    assert config.merge(None) is config
