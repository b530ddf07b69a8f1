"""Configuration for OpenCode Harness."""

from opencode_harness.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    load_config,
    load_yaml_file,
)
from opencode_harness.config.merger import deep_merge, set_nested_value
from opencode_harness.config.schema import ContextConfig, HarnessConfig, MemoryConfig

__all__ = [
    "ConfigurationError",
    "ContextConfig",
    "HarnessConfig",
    "MemoryConfig",
    "apply_env_overrides",
    "deep_merge",
    "load_config",
    "load_yaml_file",
    "set_nested_value",
]
