"""Filesystem locations used by OpenCode Harness."""

from opencode_harness.storage.paths import (
    expand_path,
    find_project_root,
    get_config_path,
    get_harness_dir,
    get_memory_path,
)

__all__ = [
    "expand_path",
    "find_project_root",
    "get_config_path",
    "get_harness_dir",
    "get_memory_path",
]
