"""Configuration models and layered loading for todo-assist.

Configuration is resolved in four layers, later layers winning:

1. Model defaults
2. YAML file (``--config`` or ``.todo-assist.yaml`` in the search directory)
3. Environment variables (``TODO_ASSIST_*`` plus legacy names)
4. Explicit overrides from the CLI

Example:
    >>> config = load_config(overrides={"singular": True})
    >>> config.assembly.warn_threshold
    600000

"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from todo_assist.core.exceptions import ConfigError, ConfigValidationError
from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS, DEFAULT_PACKAGE_MARKER
from todo_assist.core.walk import normalize_extensions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".todo-assist.yaml"

# (config path, env var names in priority order)
_ENV_VARS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("assembly", "budget"), ("TODO_ASSIST_BUDGET", "PROMPT_BUDGET")),
    (("assembly", "warn_threshold"), ("TODO_ASSIST_WARN_THRESHOLD", "PROMPT_LENGTH_THRESHOLD")),
    (("force_global",), ("TODO_ASSIST_FORCE_GLOBAL",)),
    (("include_references",), ("TODO_ASSIST_INCLUDE_REFERENCES",)),
    (("targeted",), ("TODO_ASSIST_TARGETED", "TARGETED")),
    (("diff_branch",), ("TODO_ASSIST_DIFF_WITH", "DIFF_WITH_BRANCH")),
    (("git_root",), ("TODO_ASSIST_GIT_ROOT", "GET_GIT_ROOT")),
    (("instruction_file",), ("TODO_ASSIST_INSTRUCTION_FILE", "GET_INSTRUCTION_FILE")),
)


class ScanConfig(BaseModel):
    """Which files the scanner and locators look at.

    Attributes:
        extensions: Source file extensions to scan.
        excluded_dirs: Directory names skipped by path-segment match.
        package_marker: File name marking a nested package root.

    """

    model_config = ConfigDict(frozen=True)

    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        description="Source file extensions to scan",
    )
    excluded_dirs: tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDED_DIRS,
        description="Directory names never descended into",
    )
    package_marker: str = Field(
        default=DEFAULT_PACKAGE_MARKER,
        min_length=1,
        description="File that marks a package boundary",
    )

    @field_validator("extensions", mode="after")
    @classmethod
    def validate_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Lowercase extensions and ensure a leading dot."""
        normalized = normalize_extensions(v)
        if not normalized:
            raise ValueError("at least one extension is required")
        return normalized


class AssemblyConfig(BaseModel):
    """Size limits for the assembled prompt.

    Attributes:
        budget: Hard character ceiling for non-primary files (None = unbounded).
        warn_threshold: Advisory size that triggers exclusion suggestions.

    """

    model_config = ConfigDict(frozen=True)

    budget: int | None = Field(
        default=None,
        ge=1,
        description="Character budget; files beyond it are chopped (None = unbounded)",
    )
    warn_threshold: int = Field(
        default=600_000,
        ge=1,
        description="Prompt length that triggers exclusion suggestions",
    )


class PromptConfig(BaseModel):
    """Runtime configuration for one prompt generation run.

    Attributes:
        singular: Only include the instruction file.
        force_global: Search the whole repository, ignoring package roots.
        include_references: Also include files referencing the enclosing type.
        slim: Drop view/controller-style files, keeping model-like files.
        targeted: Extract symbols from the block enclosing the instruction only.
        excludes: Basenames to drop from the file list.
        diff_branch: Branch to diff included files against (None = no diff).
        git_root: Repository root override.
        instruction_file: Instruction file override (skips the scan).
        clipboard: Copy the prompt to the system clipboard.
        scan: File scanning settings.
        assembly: Size limits.

    """

    model_config = ConfigDict(frozen=True)

    singular: bool = False
    force_global: bool = False
    include_references: bool = False
    slim: bool = False
    targeted: bool = False
    excludes: tuple[str, ...] = Field(default=(), description="Basenames to exclude")
    diff_branch: str | None = Field(default=None, description="Branch for diff reports")
    git_root: str | None = Field(default=None, description="Git root override")
    instruction_file: str | None = Field(default=None, description="Instruction file override")
    clipboard: bool = True
    scan: ScanConfig = Field(default_factory=ScanConfig)
    assembly: AssemblyConfig = Field(default_factory=AssemblyConfig)

    @field_validator("excludes", mode="after")
    @classmethod
    def basenames_only(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reduce exclusions to basenames and drop blanks."""
        return tuple(Path(name).name for name in v if name.strip())

    @field_validator("diff_branch", "git_root", "instruction_file", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        """Treat empty strings as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _set_path(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = data
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Args:
        path: YAML file to read.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        ConfigError: If the file cannot be read or is not a mapping.

    """
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect configuration values from environment variables.

    Args:
        env: Environment mapping (usually ``os.environ``).

    Returns:
        Nested dict suitable for merging into the config data.

    """
    data: dict[str, Any] = {}
    for path, names in _ENV_VARS:
        for name in names:
            value = env.get(name)
            if value is not None and value.strip():
                _set_path(data, path, value.strip())
                break
    if env.get("DISABLE_PBCOPY") is not None:
        data["clipboard"] = False
    return data


def load_config(
    config_path: Path | None = None,
    search_dir: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PromptConfig:
    """Resolve the layered configuration.

    Args:
        config_path: Explicit YAML file; must exist when given.
        search_dir: Directory checked for ``.todo-assist.yaml``.
        env: Environment mapping (defaults to ``os.environ``).
        overrides: CLI values; None entries are ignored.

    Returns:
        Validated PromptConfig.

    Raises:
        ConfigError: If the YAML file is unreadable or malformed.
        ConfigValidationError: If the merged values fail validation.

    """
    data: dict[str, Any] = {}

    if config_path is not None:
        data = _deep_merge(data, load_yaml_config(config_path))
    elif search_dir is not None and (search_dir / CONFIG_FILENAME).is_file():
        logger.debug("Loading config from %s", search_dir / CONFIG_FILENAME)
        data = _deep_merge(data, load_yaml_config(search_dir / CONFIG_FILENAME))

    data = _deep_merge(data, env_overrides(os.environ if env is None else env))

    if overrides:
        cleaned: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            _set_path(cleaned, tuple(key.split(".")), value)
        data = _deep_merge(data, cleaned)

    try:
        return PromptConfig.model_validate(data)
    except ValidationError as e:
        errors = [dict(err) for err in e.errors()]
        details = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in errors
        )
        raise ConfigValidationError(f"Invalid configuration: {details}", errors) from e
