"""
MCP tools implementation.

This module provides the tools the hello world server exposes through
the MCP protocol.
"""

from .base import BaseTool, ToolError, ToolResult, ToolValidationError
from .debug import DebugTool
from .echo import EchoTool

__all__ = [
    "BaseTool",
    "ToolError",
    "ToolResult",
    "ToolValidationError",
    "DebugTool",
    "EchoTool",
]
