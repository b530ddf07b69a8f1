"""
Plugin event types for OpenCode Harness.

Raw OpenCode payloads are decoded once, here, into closed sets of typed
events. Everything past this module works with the typed variants only.
"""

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

READ_TOOLS = frozenset({"read", "view"})
SEARCH_TOOLS = frozenset({"grep", "search", "glob"})
COMMAND_TOOLS = frozenset({"bash", "shell"})

# Argument names OpenCode and compatible agents use, in lookup order
PATH_ARGS = ("filePath", "file_path", "path")
QUERY_ARGS = ("pattern", "query")
COMMAND_ARGS = ("command", "cmd")


# =============================================================================
# Tool Events
# =============================================================================


class FileRead(BaseModel):
    """A file was read."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file_read"] = "file_read"
    path: str
    result: str = ""


class Search(BaseModel):
    """A search or grep was run."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["search"] = "search"
    query: str
    result: str = ""

    @property
    def result_count(self) -> int:
        """Number of non-empty result lines."""
        return sum(1 for line in self.result.splitlines() if line.strip())


class Command(BaseModel):
    """A shell command was executed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["command"] = "command"
    command: str
    result: str = ""


ToolEvent = Annotated[Union[FileRead, Search, Command], Field(discriminator="kind")]


def _first_str(args: dict[str, Any], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = args.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def decode_tool_event(
    tool_name: str,
    args: dict[str, Any] | None,
    result: str | None = "",
) -> FileRead | Search | Command | None:
    """Decode a post-execution tool record.

    Args:
        tool_name: Name of the tool the agent ran.
        args: Tool arguments as sent by the agent.
        result: Text output of the tool.

    Returns:
        The typed event, or None for tools the harness does not track or
        records missing their identifying argument.
    """
    args = args or {}
    result = result or ""
    tool = tool_name.lower()

    if tool in READ_TOOLS:
        path = _first_str(args, PATH_ARGS)
        if path:
            return FileRead(path=path, result=result)
    elif tool in SEARCH_TOOLS:
        query = _first_str(args, QUERY_ARGS)
        if query:
            return Search(query=query, result=result)
    elif tool in COMMAND_TOOLS:
        command = _first_str(args, COMMAND_ARGS)
        if command:
            return Command(command=command, result=result)
    else:
        return None

    logger.debug(f"Ignoring {tool_name} call without a usable argument: {sorted(args)}")
    return None


# =============================================================================
# Session Events
# =============================================================================


class SessionEventType(str, Enum):
    """Session lifecycle notifications."""

    START = "session.start"
    IDLE = "session.idle"
    END = "session.end"


class SessionEvent(BaseModel):
    """A session lifecycle notification."""

    model_config = ConfigDict(frozen=True)

    type: SessionEventType
    session_id: str | None = None


def decode_session_event(payload: dict[str, Any]) -> SessionEvent | None:
    """Decode a raw event payload, ignoring event types we do not handle."""
    try:
        event_type = SessionEventType(payload.get("type"))
    except ValueError:
        return None

    session_id = payload.get("sessionId") or payload.get("session_id")
    return SessionEvent(
        type=event_type,
        session_id=session_id if isinstance(session_id, str) else None,
    )
