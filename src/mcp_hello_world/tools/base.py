"""
Base classes for MCP tools.

Provides common functionality and interfaces for all tools,
including argument validation and result formatting.
"""

import json
from abc import abstractmethod
from typing import Any, Dict, List, Optional

import structlog

from ..protocol.schemas import MCPValidationError, ToolParameter, ToolSchema
from ..registry import EntryKind, RegistryEntry

logger = structlog.get_logger(__name__)


class ToolError(Exception):
    """Base exception for tool execution errors."""

    def __init__(
        self, message: str, code: str = "tool_error", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ToolValidationError(ToolError):
    """Error for invalid tool arguments."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", details=details)


class ToolResult:
    """Standardized tool result format."""

    def __init__(
        self,
        content: List[Dict[str, Any]],
        is_error: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.content = content
        self.is_error = is_error
        self.metadata = metadata or {}

    @classmethod
    def text(cls, text: str, metadata: Optional[Dict[str, Any]] = None) -> "ToolResult":
        """Create a successful result with a single text item."""
        return cls(content=[{"type": "text", "text": text}], metadata=metadata)

    @classmethod
    def data(cls, data: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> "ToolResult":
        """Create a result whose text item is the pretty-printed JSON of data."""
        return cls.text(json.dumps(data, indent=2), metadata=metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for MCP response."""
        result: Dict[str, Any] = {"content": self.content}

        if self.is_error:
            result["isError"] = True
        if self.metadata:
            result["metadata"] = self.metadata

        return result


class BaseTool(RegistryEntry):
    """
    Base class for all MCP tools.

    Provides argument validation against the declared input schema
    and result formatting.
    """

    kind = EntryKind.TOOL

    # Tool metadata (must be defined by subclasses)
    name: str = ""
    description: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize tool with configuration.

        Args:
            config: Tool-specific configuration
        """
        self.config = config or {}
        self.logger = logger.bind(tool=self.name)

    @property
    def key(self) -> str:
        return self.name

    @abstractmethod
    def get_schema(self) -> ToolSchema:
        """
        Get the tool input schema.

        Returns:
            Input schema for MCP protocol
        """
        pass

    @abstractmethod
    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        """
        Execute the tool with validated arguments.

        Args:
            arguments: Tool arguments from MCP request

        Returns:
            Tool execution result
        """
        pass

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.get_schema().to_json_schema()

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    async def invoke(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate arguments, execute, and format the result.

        Raises:
            MCPValidationError: If arguments do not match the schema
        """
        self.logger.info("Executing tool", arguments=arguments)

        try:
            self._validate_arguments(arguments)
        except ToolValidationError as e:
            self.logger.warning("Invalid tool arguments", error_message=e.message)
            raise MCPValidationError(e.message, data=e.details) from e

        result = await self.execute(arguments)

        self.logger.info("Tool execution completed", success=not result.is_error)
        return result.to_dict()

    def _validate_arguments(self, arguments: Dict[str, Any]) -> None:
        """
        Validate tool arguments against schema.

        Raises:
            ToolValidationError: If validation fails
        """
        schema = self.get_schema()

        for required_param in schema.required:
            if required_param not in arguments:
                raise ToolValidationError(
                    f"Missing required parameter: {required_param}",
                    details={"missing_parameter": required_param},
                )

        for param_name, param_value in arguments.items():
            if param_name in schema.properties:
                self._validate_parameter(param_name, param_value, schema.properties[param_name])

    def _validate_parameter(self, name: str, value: Any, definition: ToolParameter) -> None:
        """Validate a single parameter's type and allowed values."""
        expected = _JSON_TYPES.get(definition.type)
        if expected is not None:
            # bool is an int subclass but never a JSON number
            is_bool = isinstance(value, bool)
            if not isinstance(value, expected) or (is_bool and definition.type != "boolean"):
                raise ToolValidationError(
                    f"Parameter '{name}' must be a {definition.type}",
                    details={
                        "parameter": name,
                        "expected_type": definition.type,
                        "actual_type": type(value).__name__,
                    },
                )

        if definition.enum and value not in definition.enum:
            raise ToolValidationError(
                f"Parameter '{name}' must be one of: {definition.enum}",
                details={
                    "parameter": name,
                    "allowed_values": definition.enum,
                    "actual_value": value,
                },
            )

    def _create_parameter(
        self,
        param_type: str,
        description: Optional[str] = None,
        enum: Optional[List[str]] = None,
        default: Optional[Any] = None,
    ) -> ToolParameter:
        """Helper to create a parameter definition."""
        return ToolParameter(type=param_type, description=description, enum=enum, default=default)

    def _create_schema(
        self,
        parameters: Dict[str, ToolParameter],
        required: List[str],
    ) -> ToolSchema:
        """Helper to create an object input schema."""
        return ToolSchema(type="object", properties=parameters, required=required)


_JSON_TYPES = {
    "string": str,
    "number": (int, float),
    "integer": int,
    "boolean": bool,
    "object": dict,
    "array": list,
}
