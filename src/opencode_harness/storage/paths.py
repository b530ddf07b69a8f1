"""
Path utilities for OpenCode Harness.

All harness state lives under ``<project>/.opencode/.harness/``.
"""

import os
from pathlib import Path

HARNESS_DIR_PARTS = (".opencode", ".harness")


def expand_path(path: str | Path) -> Path:
    """
    Expand a path string, handling ~ and environment variables.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded and resolved Path.
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)
    return Path(path).resolve()


def get_harness_dir(project_path: str | Path) -> Path:
    """
    Get the harness directory for a project.

    Returns:
        Path to <project>/.opencode/.harness/
    """
    return Path(project_path).joinpath(*HARNESS_DIR_PARTS)


def get_memory_path(project_path: str | Path) -> Path:
    """
    Get the durable memory file for a project.

    Returns:
        Path to <project>/.opencode/.harness/memory.json
    """
    return get_harness_dir(project_path) / "memory.json"


def get_config_path(project_path: str | Path) -> Path:
    """
    Get the harness configuration file for a project.

    Returns:
        Path to <project>/.opencode/.harness/config.yaml
    """
    return get_harness_dir(project_path) / "config.yaml"


def find_project_root(start_path: Path | None = None) -> Path | None:
    """
    Find the nearest directory containing a ``.opencode`` folder.

    Args:
        start_path: Starting directory to search from. Defaults to cwd.

    Returns:
        The project root if found, None otherwise.
    """
    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    for candidate in (current, *current.parents):
        if (candidate / HARNESS_DIR_PARTS[0]).is_dir():
            return candidate

    return None
