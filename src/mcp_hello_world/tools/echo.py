"""
Echo tool: greets the caller with their own message.
"""

from typing import Any, Dict

from ..protocol.schemas import ToolSchema
from .base import BaseTool, ToolResult


class EchoTool(BaseTool):
    """Tool that echoes a message back, prefixed with a greeting."""

    name = "echo"
    description = 'Echoes the input message, prefixed with "Hello "'

    greeting = "Hello "

    def get_schema(self) -> ToolSchema:
        return self._create_schema(
            parameters={"message": self._create_parameter("string")},
            required=["message"],
        )

    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        return ToolResult.text(f"{self.greeting}{arguments['message']}")
