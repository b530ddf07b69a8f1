"""Tool surface exposed to the agent."""

from opencode_harness.tools.base import Tool, ToolExecutionError
from opencode_harness.tools.models import ToolParameter, ToolResult

__all__ = [
    "Tool",
    "ToolExecutionError",
    "ToolParameter",
    "ToolResult",
]
