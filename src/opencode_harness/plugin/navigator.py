"""Context navigation tool.

Lets the agent inspect what it has already seen and what the project memory
holds, instead of re-reading files to find out.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from opencode_harness.memory.models import utcnow
from opencode_harness.tools.base import Tool
from opencode_harness.tools.models import ToolParameter, ToolResult

if TYPE_CHECKING:
    from opencode_harness.plugin.session import HarnessSession

logger = logging.getLogger(__name__)

ACTIONS = ["status", "seen", "recent", "important", "memory", "search"]
MAX_SEARCH_RESULTS = 10


def _minutes_since(moment: datetime) -> int:
    return round((utcnow() - moment).total_seconds() / 60)


class ContextNavTool(Tool):
    """Navigate the session's context and memory.

    Bad or missing arguments come back as an error result, never as an
    exception.
    """

    def __init__(self, session: "HarnessSession"):
        """Initialize the tool.

        Args:
            session: Session whose tracker and memory are inspected.
        """
        self.session = session
        super().__init__()

    @property
    def name(self) -> str:
        """Tool name."""
        return "context_nav"

    @property
    def description(self) -> str:
        """Tool description."""
        return (
            "Navigate and explore the context state. Use this to view what "
            "files and functions have been seen, check whether a file was already "
            "read, recall memories from past sessions, and check context usage. "
            "Actions: 'status' (context summary), 'seen' (was a path viewed), "
            "'recent' (recently viewed items), 'important' (high-importance items), "
            "'memory' (relevant memories), 'search' (search memories for a term)."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            ToolParameter(
                name="action",
                type="string",
                description="What to look up.",
                required=True,
                enum=ACTIONS,
            ),
            ToolParameter(
                name="path",
                type="string",
                description="Path to check, required for 'seen'.",
                required=False,
            ),
            ToolParameter(
                name="query",
                type="string",
                description="Search term, required for 'search'.",
                required=False,
            ),
            ToolParameter(
                name="limit",
                type="integer",
                description="Maximum items for 'recent' and 'important'.",
                required=False,
                default=10,
            ),
        ]

    async def execute(self, **kwargs) -> ToolResult:
        """Run one navigation action.

        Args:
            action: One of status, seen, recent, important, memory, search
            path: Path for 'seen'
            query: Term for 'search'
            limit: Item limit for listings

        Returns:
            ToolResult with the rendered answer
        """
        tool_call_id = kwargs.get("tool_call_id", "unknown")

        try:
            args = self.validate_input(**kwargs)
        except ValueError as e:
            return self._error(tool_call_id, str(e))

        action = args["action"]
        path = args.get("path")
        query = args.get("query")
        limit = max(1, args["limit"])

        if action == "seen" and not path:
            return self._error(tool_call_id, 'path is required for "seen" action')
        if action == "search" and not query:
            return self._error(tool_call_id, 'query is required for "search" action')
        if action in ("memory", "search") and self.session.memory is None:
            return ToolResult(tool_call_id=tool_call_id, output="Memory is disabled.")

        if action == "status":
            output = self._format_status()
        elif action == "seen":
            output = self._format_seen(path)
        elif action == "recent":
            output = self._format_recent(limit)
        elif action == "important":
            output = self._format_important(limit)
        elif action == "memory":
            output = self.session.memory.get_context_string(
                self.session.config.memory.context_max_tokens
            )
        else:
            output = self._format_search(query)

        return ToolResult(tool_call_id=tool_call_id, output=output)

    def _error(self, tool_call_id: str, message: str) -> ToolResult:
        logger.debug(f"context_nav rejected call: {message}")
        return ToolResult.failure(tool_call_id, message)

    # =========================================================================
    # Formatting
    # =========================================================================

    def _format_status(self) -> str:
        tracker = self.session.tracker
        state = tracker.get_state()
        lines = [
            "## Context Status",
            "",
            f"**Items Tracked:** {len(state.items)}",
            f"**Estimated Tokens:** {state.total_tokens_estimate:,}",
            f"**Needs Compaction:** {'Yes' if state.needs_compaction else 'No'}",
        ]

        if state.last_compaction_at:
            ago = _minutes_since(state.last_compaction_at)
            lines.append(f"**Last Compaction:** {ago} minutes ago")

        lines.extend(["", "---", "", tracker.format_for_prompt()])
        return "\n".join(lines)

    def _format_seen(self, path: str) -> str:
        if self.session.tracker.has_seen(path):
            return f"✓ Already viewed: {path}"
        return f"✗ Not yet viewed: {path}"

    def _format_recent(self, limit: int) -> str:
        items = self.session.tracker.get_recent(limit)
        if not items:
            return "No items viewed yet."

        lines = ["## Recently Viewed", ""]
        for item in items:
            lines.append(
                f"- **{item.kind}**: {item.path} _({_minutes_since(item.viewed_at)}m ago)_"
            )
        return "\n".join(lines)

    def _format_important(self, limit: int) -> str:
        items = self.session.tracker.get_by_importance()[:limit]
        if not items:
            return "No items tracked yet."

        lines = ["## High Importance Items", ""]
        for item in items:
            lines.append(f"- [{item.importance * 100:.0f}%] **{item.kind}**: {item.path}")
        return "\n".join(lines)

    def _format_search(self, query: str) -> str:
        results = self.session.memory.search_memories(query)
        if not results:
            return f'No memories found for: "{query}"'

        lines = [f'## Memory Search: "{query}"', "", f"Found {len(results)} results:", ""]
        for entry in results[:MAX_SEARCH_RESULTS]:
            date = entry.timestamp.strftime("%Y-%m-%d")
            lines.append(f"- [{entry.memory_type}] {entry.content} _({date})_")
        return "\n".join(lines)
