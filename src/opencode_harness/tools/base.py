"""Base class for tools exposed to the agent."""

from abc import ABC, abstractmethod
from typing import Any

from opencode_harness.tools.models import ToolParameter, ToolResult

# JSON schema type name -> accepted Python types
JSON_TYPES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
}

# Arguments the host may pass alongside the declared parameters
INTERNAL_PARAMS = frozenset({"tool_call_id"})


class ToolExecutionError(Exception):
    """Raised when a tool definition is unusable."""

    pass


class Tool(ABC):
    """Base class for tools the harness exposes to the agent.

    Subclasses declare a name, a description and their parameters; the base
    class derives the JSON input schema from them and normalizes incoming
    arguments before ``execute`` sees them.
    """

    def __init__(self):
        """Initialize the tool."""
        self._validate_definition()

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name (must be unique)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """What the tool does, shown to the agent."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> list[ToolParameter]:
        """Declared tool parameters."""
        pass

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """Run the tool.

        Args:
            **kwargs: Arguments sent by the agent

        Returns:
            ToolResult with output or error
        """
        pass

    def get_input_schema(self) -> dict[str, Any]:
        """Build the JSON schema for the tool's input."""
        properties = {}
        for param in self.parameters:
            schema: dict[str, Any] = {"type": param.type, "description": param.description}
            if param.enum:
                schema["enum"] = param.enum
            if param.default is not None:
                schema["default"] = param.default
            properties[param.name] = schema

        return {
            "type": "object",
            "properties": properties,
            "required": [p.name for p in self.parameters if p.required],
        }

    def get_tool_definition(self) -> dict[str, Any]:
        """Get the definition used to register the tool with the agent."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.get_input_schema(),
        }

    def validate_input(self, **kwargs) -> dict[str, Any]:
        """Check and normalize arguments.

        ``None`` values count as not provided. Defaults are filled in, integer
        parameters accept numeric strings, and enum values are enforced.

        Args:
            **kwargs: Arguments sent by the agent

        Returns:
            The declared arguments with defaults applied

        Raises:
            ValueError: If arguments are unknown, missing or of the wrong type
        """
        provided = {k: v for k, v in kwargs.items() if v is not None}
        declared = {p.name: p for p in self.parameters}

        unknown = set(provided) - set(declared) - INTERNAL_PARAMS
        if unknown:
            raise ValueError(f"Unknown parameters: {', '.join(sorted(unknown))}")

        missing = {p.name for p in self.parameters if p.required} - set(provided)
        if missing:
            raise ValueError(f"Missing required parameters: {', '.join(sorted(missing))}")

        args: dict[str, Any] = {}
        for name, param in declared.items():
            if name not in provided:
                if param.default is not None:
                    args[name] = param.default
                continue

            value = _coerce(param, provided[name])
            if param.enum and value not in param.enum:
                raise ValueError(
                    f"Invalid value for {name}: {value!r} "
                    f"(expected one of: {', '.join(param.enum)})"
                )
            args[name] = value

        return args

    def _validate_definition(self) -> None:
        """Reject tools that could not be registered.

        Raises:
            ToolExecutionError: If the definition is invalid
        """
        if not self.name:
            raise ToolExecutionError("Tool name cannot be empty")

        if not self.description:
            raise ToolExecutionError("Tool description cannot be empty")

        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ToolExecutionError("Parameter names must be unique")

        for param in self.parameters:
            if param.type not in JSON_TYPES:
                raise ToolExecutionError(f"Unsupported type for {param.name}: {param.type}")

    def __repr__(self) -> str:
        return f"<Tool name={self.name}>"


def _coerce(param: ToolParameter, value: Any) -> Any:
    if param.type == "integer" and isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass

    expected = JSON_TYPES[param.type]
    # bool is an int subclass but never a valid integer or number here
    if isinstance(value, bool) and param.type != "boolean":
        raise ValueError(f"Invalid type for {param.name}: expected {param.type}")
    if not isinstance(value, expected):
        raise ValueError(f"Invalid type for {param.name}: expected {param.type}")
    return value
