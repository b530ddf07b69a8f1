"""Data models for the tool surface exposed to the agent."""

from typing import Any, Optional

from pydantic import BaseModel


class ToolParameter(BaseModel):
    """Defines a parameter for a tool."""

    name: str
    type: str  # JSON schema type: "string", "integer", "number", "boolean", "array", "object"
    description: str
    required: bool = True
    default: Optional[Any] = None
    enum: Optional[list[str]] = None  # For restricted choices


class ToolResult(BaseModel):
    """Text handed back to the agent after a tool call.

    Failures are results too: ``is_error`` is set and ``output`` carries the
    message so the agent can read it.
    """

    tool_call_id: str
    output: str
    error: Optional[str] = None
    is_error: bool = False

    @classmethod
    def failure(cls, tool_call_id: str, message: str) -> "ToolResult":
        """Build an error result."""
        return cls(
            tool_call_id=tool_call_id,
            output=f"Error: {message}",
            error=message,
            is_error=True,
        )

    def __str__(self) -> str:
        if self.is_error:
            return f"Error: {self.error}"
        return self.output[:200] + ("..." if len(self.output) > 200 else "")
