"""Configuration management for subgraph-validate."""

from dataclasses import dataclass, replace
from typing import Optional

import yaml

from . import utils
from .errors import ConfigError
from .versions import DEFAULT_SPEC_VERSION, SpecVersion


@dataclass(frozen=True)
class Config:
    """
    Configuration for one validation run.

    Built once at startup and passed into every validation call; never
    modified afterwards.
    """

    spec_version: SpecVersion = DEFAULT_SPEC_VERSION
    batch_label_prefix: str = "sgd"
    allow_non_deterministic_fulltext_search: bool = False


def get_default_config_path() -> str:
    """Get default config file path."""
    return utils.expand_path("~/.subgraph-validate/config.yaml")


def load(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Config object with defaults for missing values.

    Raises:
        ConfigError: If the file is malformed or holds invalid values
    """
    if config_path is None:
        config_path = get_default_config_path()

    # Return defaults if config doesn't exist
    if not utils.exists(config_path):
        return Config()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    prefix = data.get("batch_label_prefix", "sgd")
    if not isinstance(prefix, str):
        raise ConfigError("batch_label_prefix must be a string")

    # Merge with defaults
    return Config(
        spec_version=SpecVersion.parse(data.get("spec_version", str(DEFAULT_SPEC_VERSION))),
        batch_label_prefix=prefix,
    )


def for_run(cfg: Config, spec_version: Optional[str] = None) -> Config:
    """
    Finalize the configuration used by a CLI run.

    Applies a command-line spec version override and turns on
    non-deterministic fulltext search, which offline validation always
    permits.
    """
    if spec_version:
        cfg = replace(cfg, spec_version=SpecVersion.parse(spec_version))
    return replace(cfg, allow_non_deterministic_fulltext_search=True)


def create_example_config(path: Optional[str] = None) -> str:
    """Create an example config file and return its path."""
    if path is None:
        path = get_default_config_path()

    utils.ensure_dir(utils.dirname(path))

    example = {
        "spec_version": str(DEFAULT_SPEC_VERSION),
        "batch_label_prefix": "sgd",
    }

    with open(path, "w") as f:
        yaml.dump(example, f, default_flow_style=False, sort_keys=False)

    return path
