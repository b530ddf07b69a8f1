"""
OpenCode plugin surface.

Usage:
    from opencode_harness.plugin import HarnessSession

    session = HarnessSession.from_project("/path/to/project", session_id="abc123")
    await session.on_event({"type": "session.start"})
    await session.on_tool_executed("read", {"filePath": "src/app.py"}, file_text)
    prompt_block = session.get_prompt_context()
    await session.on_event({"type": "session.end"})
"""

from opencode_harness.plugin.events import (
    Command,
    FileRead,
    Search,
    SessionEvent,
    SessionEventType,
    ToolEvent,
    decode_session_event,
    decode_tool_event,
)
from opencode_harness.plugin.navigator import ContextNavTool
from opencode_harness.plugin.session import HarnessSession

__all__ = [
    "Command",
    "ContextNavTool",
    "FileRead",
    "HarnessSession",
    "Search",
    "SessionEvent",
    "SessionEventType",
    "ToolEvent",
    "decode_session_event",
    "decode_tool_event",
]
