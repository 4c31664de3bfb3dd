"""
MCP Protocol implementation for the MCP Hello World server.

This module provides the core Model Context Protocol implementation,
including message handling, transports, and schema definitions.
"""

from .handlers import MCPHandler
from .schemas import (
    MCPError,
    MCPInternalError,
    MCPMethodNotFoundError,
    MCPNotFoundError,
    MCPParseError,
    MCPRequest,
    MCPResponse,
    MCPValidationError,
    ServerInfo,
    parse_request,
)
from .sse import SSEBroadcaster, SSEClient
from .transport import HttpTransport, StdioTransport, TransportError

__all__ = [
    "MCPHandler",
    "StdioTransport",
    "HttpTransport",
    "TransportError",
    "SSEBroadcaster",
    "SSEClient",
    "MCPError",
    "MCPParseError",
    "MCPMethodNotFoundError",
    "MCPNotFoundError",
    "MCPValidationError",
    "MCPInternalError",
    "MCPRequest",
    "MCPResponse",
    "ServerInfo",
    "parse_request",
]
