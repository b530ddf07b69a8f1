"""CLI command modules."""

from opencode_harness.cli.commands import memory, status

__all__ = ["memory", "status"]
