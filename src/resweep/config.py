# Copyright (c) Syntropy Systems
"""Configuration loading for resweep runs."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml
from pydantic import ValidationError

from resweep.errors import ConfigurationError
from resweep.models.config import RunConfig


@dataclass(frozen=True)
class LoadedConfig:
    """A validated configuration together with its source text."""

    config: RunConfig
    path: Path | None
    text: str | None


def parse_config(data: object) -> RunConfig:
    """Validate a raw mapping into a RunConfig.

    Raises ConfigurationError on any invalid field or combination.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Configuration must be a mapping, got {type(data).__name__}"
        raise ConfigurationError(msg)
    try:
        return RunConfig.model_validate(cast("dict[str, object]", data))
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e


def load_config(path: Path | str) -> LoadedConfig:
    """Load and validate a YAML run configuration.

    Relative checkpoint, log and history paths are resolved against the
    directory of the configuration file.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text()
    except OSError as e:
        msg = f"Cannot read configuration {config_path}: {e}"
        raise ConfigurationError(msg) from e

    try:
        data = cast("object", yaml.safe_load(text))
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {config_path}: {e}"
        raise ConfigurationError(msg) from e

    config = parse_config(data)
    _resolve_paths(config, config_path.parent)
    return LoadedConfig(config=config, path=config_path, text=text)


def _resolve_paths(config: RunConfig, base: Path) -> None:
    """Make relative output paths relative to ``base``."""
    if not config.checkpoint.path.is_absolute():
        config.checkpoint.path = base / config.checkpoint.path
    if config.io.log_path is not None and not config.io.log_path.is_absolute():
        config.io.log_path = base / config.io.log_path
    history = config.io.history_path
    if history is not None and not history.is_absolute():
        config.io.history_path = base / history
