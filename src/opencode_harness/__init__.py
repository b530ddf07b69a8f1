"""
OpenCode Harness - context tracking and session memory

Tracks what an OpenCode agent has seen during a session, signals when the
context should be compacted, and keeps a prunable per-project memory log.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("opencode-harness")
except PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "__version__",
]
