"""Tests for configuration loading."""

import dataclasses

import pytest

from subgraph_schema_validator import config
from subgraph_schema_validator.config import Config
from subgraph_schema_validator.errors import ConfigError
from subgraph_schema_validator.versions import SPEC_VERSION_1_0_0, SPEC_VERSION_1_1_0, SpecVersion


def test_defaults_when_file_missing(tmp_path):
    cfg = config.load(str(tmp_path / "nope.yaml"))
    assert cfg == Config()
    assert cfg.spec_version == SPEC_VERSION_1_1_0
    assert cfg.allow_non_deterministic_fulltext_search is False


def test_loads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spec_version: 1.0.0\nbatch_label_prefix: dep\n", encoding="utf-8")
    cfg = config.load(str(path))
    assert cfg.spec_version == SPEC_VERSION_1_0_0
    assert cfg.batch_label_prefix == "dep"


def test_unknown_spec_version_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spec_version: 9.9.9\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        config.load(str(path))


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        config.load(str(path))


def test_config_is_immutable():
    cfg = Config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.allow_non_deterministic_fulltext_search = True


def test_for_run_enables_fulltext_and_overrides_version():
    cfg = config.for_run(Config(), "1.0.0")
    assert cfg.allow_non_deterministic_fulltext_search is True
    assert cfg.spec_version == SPEC_VERSION_1_0_0
    assert config.for_run(Config()).spec_version == SPEC_VERSION_1_1_0


def test_example_config_round_trips(tmp_path):
    path = config.create_example_config(str(tmp_path / "nested" / "config.yaml"))
    assert config.load(path) == Config()


@pytest.mark.parametrize("text", ["1.1", "1.1.x", "0.0.1", ""])
def test_spec_version_parse_rejects(text):
    with pytest.raises(ConfigError):
        SpecVersion.parse(text)


def test_spec_versions_are_ordered():
    assert SpecVersion.parse("0.0.9") < SpecVersion.parse("1.0.0") < SpecVersion.parse("1.1.0")
    assert str(SpecVersion.parse("1.2.0")) == "1.2.0"
