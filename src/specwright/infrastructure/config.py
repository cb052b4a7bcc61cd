"""Configuration loading for specwright."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import jsonschema

from specwright.domain.exceptions import ConfigurationError
from specwright.domain.models import ProjectLayout
from specwright.schemas import validate_config

CONFIG_FILENAME = "specwright.json"
PROJECTS_ROOT_ENV = "SPECWRIGHT_PROJECTS_ROOT"
DEFAULT_PROJECTS_ROOT = "specwright/outputs/projects"


@dataclass(frozen=True)
class SpecwrightConfig:
    """Resolved settings for one process."""

    projects_root: str
    log_file: str | None = None

    @property
    def layout(self) -> ProjectLayout:
        return ProjectLayout(self.projects_root)


def _read_config_file(path: Path) -> dict:
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")
    try:
        validate_config(data)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e.message}") from e
    return data


def load_config(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> SpecwrightConfig:
    """
    Load configuration.

    Precedence, highest first: SPECWRIGHT_PROJECTS_ROOT, the config file,
    the default specwright/outputs/projects under the working directory.

    Args:
        path: Explicit config file; must exist when given. Without it,
            specwright.json in the working directory is read if present.
        env: Environment to read overrides from, os.environ by default
        cwd: Working directory, Path.cwd() by default

    Returns:
        SpecwrightConfig

    Raises:
        ConfigurationError: If the file is missing (when explicit) or invalid
    """
    env = os.environ if env is None else env
    cwd = cwd or Path.cwd()

    if path is not None and not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    config_path = path or cwd / CONFIG_FILENAME
    data = _read_config_file(config_path) if config_path.exists() else {}

    projects_root = env.get(PROJECTS_ROOT_ENV) or data.get("projects_root")
    if projects_root is None:
        projects_root = str(cwd / DEFAULT_PROJECTS_ROOT)
    elif not Path(projects_root).is_absolute():
        projects_root = str(cwd / projects_root)

    return SpecwrightConfig(projects_root=projects_root, log_file=data.get("log_file"))
