"""
MCP Protocol message schemas and data structures.

Defines the JSON-RPC 2.0 message formats for the Model Context Protocol,
including requests, responses, and error handling.
"""

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

# bool ids are rejected rather than coerced to 0/1
RequestId = Optional[Union[StrictStr, StrictInt]]


class MCPError(Exception):
    """Base exception for MCP protocol errors."""

    def __init__(
        self,
        message: str,
        code: int = -32000,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to JSON-RPC error format."""
        error_dict = {
            "code": self.code,
            "message": self.message,
        }
        if self.data:
            error_dict["data"] = self.data
        return error_dict


class MCPParseError(MCPError):
    """Error for input that cannot be read as a JSON-RPC request."""

    def __init__(self, message: str = "Parse error"):
        super().__init__(message, code=-32700)


class MCPValidationError(MCPError):
    """Error for invalid request parameters."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32602, data=data)


class MCPNotFoundError(MCPError):
    """Error for an unknown resource, tool or prompt."""

    def __init__(self, kind: str):
        super().__init__(f"{kind} not found", code=-32602)


class MCPMethodNotFoundError(MCPError):
    """Error for unknown method calls."""

    def __init__(self, method: str):
        super().__init__("Method not found", code=-32601)
        self.method = method


class MCPInternalError(MCPError):
    """Error for internal server issues."""

    def __init__(self, message: str = "Internal error", data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32603, data=data)


# Base message types
class MCPMessage(BaseModel):
    """Base class for all MCP messages."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")


class MCPRequest(MCPMessage):
    """Incoming MCP request. A null id marks a fire-and-forget call."""

    id: RequestId = Field(default=None, description="Request ID")
    method: str = Field(description="Method name")
    params: Optional[Union[Dict[str, Any], List[Any]]] = Field(
        default=None, description="Method parameters (by name or by position)"
    )

    @property
    def parameters(self) -> Dict[str, Any]:
        """Named request parameters; empty when absent or positional."""
        return self.params if isinstance(self.params, dict) else {}


class MCPResponse(MCPMessage):
    """MCP response carrying either a result or an error."""

    id: RequestId = Field(default=None, description="Request ID")
    result: Optional[Dict[str, Any]] = Field(default=None, description="Response result")
    error: Optional[Dict[str, Any]] = Field(default=None, description="Error information")

    def model_dump(self, **kwargs) -> Dict[str, Any]:
        """Dump in JSON-RPC 2.0 shape: result OR error, never both."""
        result = super().model_dump(**kwargs)

        if self.error is not None:
            result.pop("result", None)
        else:
            result.pop("error", None)

        return result

    def to_json(self) -> str:
        """Serialize to a single-line JSON document."""
        return json.dumps(self.model_dump(), separators=(",", ":"))

    @classmethod
    def success(cls, request_id: RequestId, result: Dict[str, Any]) -> "MCPResponse":
        """Create a success envelope."""
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: RequestId, error: MCPError) -> "MCPResponse":
        """Create an error envelope from an MCP error."""
        return cls(id=request_id, error=error.to_dict())


class ServerInfo(BaseModel):
    """Information about the MCP server."""

    name: str = Field(default="mcp-hello-world", description="Server name")
    version: str = Field(default="1.0.0", description="Server version")


# Tool structures
class ToolParameter(BaseModel):
    """Tool parameter definition."""

    type: str = Field(description="Parameter type")
    description: Optional[str] = Field(default=None, description="Parameter description")
    enum: Optional[List[str]] = Field(default=None, description="Allowed values")
    default: Optional[Any] = Field(default=None, description="Default value")


class ToolSchema(BaseModel):
    """Tool input schema definition."""

    type: str = Field(default="object", description="Schema type")
    properties: Dict[str, ToolParameter] = Field(
        default_factory=dict, description="Tool parameters"
    )
    required: List[str] = Field(default_factory=list, description="Required parameters")

    def to_json_schema(self) -> Dict[str, Any]:
        """Render as a plain JSON schema, omitting unset keywords."""
        schema: Dict[str, Any] = {
            "type": self.type,
            "properties": {
                name: param.model_dump(exclude_none=True)
                for name, param in self.properties.items()
            },
        }
        if self.required:
            schema["required"] = list(self.required)
        return schema


def parse_request(raw: Union[str, bytes, Dict[str, Any]]) -> MCPRequest:
    """
    Parse one JSON-RPC request.

    Args:
        raw: JSON text, or an already decoded JSON value

    Returns:
        Validated request

    Raises:
        MCPParseError: If the input is not JSON, not an object, or lacks a method
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MCPParseError() from e

    if not isinstance(raw, dict):
        raise MCPParseError()

    try:
        return MCPRequest.model_validate(raw)
    except ValidationError as e:
        raise MCPParseError() from e
