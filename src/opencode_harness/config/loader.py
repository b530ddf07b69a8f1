"""
Configuration loader for OpenCode Harness.

Loads and merges configuration from:
1. Default values
2. Project config (<project>/.opencode/.harness/config.yaml)
3. Environment variables (HARNESS_<SECTION>_<KEY>)
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from opencode_harness.config.merger import deep_merge, set_nested_value
from opencode_harness.config.schema import HarnessConfig
from opencode_harness.storage.paths import get_config_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "HARNESS_"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary, empty if the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Expected a mapping in {path}")
    return content


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value to bool, int, float or string."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if re.match(r"^-?\d+$", value):
        return int(value)
    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)
    return value


def apply_env_overrides(
    config: dict[str, Any], environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    ``HARNESS_CONTEXT_MAX_TOKENS=50000`` sets ``context.max_tokens``: the first
    segment after the prefix names the section, the rest is the key.

    Args:
        config: Configuration dictionary.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Configuration with environment overrides applied.
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        section, _, name = key[len(ENV_PREFIX) :].lower().partition("_")
        if not name:
            continue

        config = set_nested_value(config, f"{section}.{name}", _parse_env_value(value))

    return config


def load_config(
    project_path: Path | str | None = None,
    skip_env: bool = False,
) -> HarnessConfig:
    """
    Load and merge configuration for a project.

    Args:
        project_path: Project root. Defaults to cwd.
        skip_env: Skip environment variable overrides.

    Returns:
        Merged and validated HarnessConfig.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = HarnessConfig().model_dump()

    config_path = get_config_path(project_path or Path.cwd())
    if config_path.exists():
        config_dict = deep_merge(config_dict, load_yaml_file(config_path))
        logger.debug(f"Loaded project config from {config_path}")

    if not skip_env:
        config_dict = apply_env_overrides(config_dict)

    try:
        return HarnessConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
