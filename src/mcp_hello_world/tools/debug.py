"""
Debug tool for inspecting what the server exposes.
"""

from typing import Any, Dict, Optional

from ..protocol.schemas import ToolSchema
from ..registry import EntryKind, Registry
from .base import BaseTool, ToolResult


class DebugTool(BaseTool):
    """Tool listing every resource, tool and prompt in the registry."""

    name = "debug"
    description = "Lists all available MCP method definitions on the server"

    def __init__(self, registry: Registry, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.registry = registry

    def get_schema(self) -> ToolSchema:
        return self._create_schema(parameters={}, required=[])

    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        tools = [
            {"name": entry["name"], "description": entry["description"]}
            for entry in self.registry.list(EntryKind.TOOL)
        ]
        prompts = [
            {"name": entry["name"], "description": entry["description"]}
            for entry in self.registry.list(EntryKind.PROMPT)
        ]

        return ToolResult.data(
            {
                "resources": list(self.registry.keys(EntryKind.RESOURCE)),
                "tools": tools,
                "prompts": prompts,
            }
        )
