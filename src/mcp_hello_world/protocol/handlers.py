"""
MCP Protocol message handlers.

Implements the core logic for handling MCP protocol messages and
routing them to the registry's resources, tools and prompts.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import structlog

from ..registry import EntryKind, Registry
from ..resources import DynamicResource, GreetingResource
from .schemas import (
    PROTOCOL_VERSION,
    MCPError,
    MCPInternalError,
    MCPMethodNotFoundError,
    MCPNotFoundError,
    MCPRequest,
    MCPResponse,
    MCPValidationError,
    ServerInfo,
)

logger = structlog.get_logger(__name__)

RouteHandler = Callable[[MCPRequest], Awaitable[Dict[str, Any]]]


class MCPHandler:
    """
    Main handler for MCP protocol messages.

    Routes incoming requests to built-in protocol methods or registry
    entries. handle_request() never raises: every failure becomes a
    JSON-RPC error envelope.
    """

    def __init__(
        self,
        registry: Registry,
        server_info: Optional[ServerInfo] = None,
        dynamic_resources: Optional[List[Type[DynamicResource]]] = None,
    ):
        self.registry = registry
        self.server_info = server_info or ServerInfo()
        self.dynamic_resources = (
            dynamic_resources if dynamic_resources is not None else [GreetingResource]
        )

        # Subscriptions and change notifications are not supported
        self._capabilities = {
            "resources": {"subscribe": False, "listChanged": False},
            "tools": {"listChanged": False},
            "prompts": {"listChanged": False},
        }

        self._routes: Dict[str, RouteHandler] = {
            "initialize": self._handle_initialize,
            "resources/list": self._handle_list_resources,
            "resources/get": self._handle_get_resource,
            "resources/read": self._handle_get_resource,
            "tools/list": self._handle_list_tools,
            "tools/invoke": self._handle_invoke_tool,
            "tools/call": self._handle_invoke_tool,
            "prompts/list": self._handle_list_prompts,
            "prompts/get": self._handle_get_prompt,
        }

    @property
    def methods(self) -> List[str]:
        """Method names this handler routes."""
        return list(self._routes)

    async def handle_request(self, request: MCPRequest) -> MCPResponse:
        """
        Handle incoming MCP request.

        Args:
            request: Incoming request

        Returns:
            Response to send back to client
        """
        logger.debug(
            "Handling request",
            method=request.method,
            request_id=request.id,
        )

        try:
            route = self._routes.get(request.method)
            if route is None:
                raise MCPMethodNotFoundError(request.method)

            result = await route(request)
            return MCPResponse.success(request.id, result)

        except MCPError as e:
            logger.warning(
                "MCP error handling request",
                method=request.method,
                request_id=request.id,
                error_code=e.code,
                error_message=e.message,
            )
            return MCPResponse.failure(request.id, e)

        except Exception as e:
            logger.error(
                "Unexpected error handling request",
                method=request.method,
                request_id=request.id,
                error=str(e),
                exc_info=True,
            )
            return MCPResponse.failure(request.id, MCPInternalError())

    async def _handle_initialize(self, request: MCPRequest) -> Dict[str, Any]:
        """Handle initialize request."""
        params = request.parameters
        logger.info(
            "Initializing MCP session",
            requested_protocol_version=params.get("protocolVersion"),
            client_info=params.get("clientInfo"),
        )

        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {name: dict(flags) for name, flags in self._capabilities.items()},
            "serverInfo": self.server_info.model_dump(),
        }

    async def _handle_list_resources(self, request: MCPRequest) -> Dict[str, Any]:
        return {"resources": list(self.registry.list(EntryKind.RESOURCE))}

    async def _handle_get_resource(self, request: MCPRequest) -> Dict[str, Any]:
        """Handle resources/get, resolving dynamic URIs before the registry."""
        uri = self._require_string(request, "uri")

        for resource_type in self.dynamic_resources:
            if resource_type.matches(uri):
                logger.debug("Resolving dynamic resource", uri=uri)
                return await resource_type.from_uri(uri).invoke({})

        resource = self.registry.get(EntryKind.RESOURCE, uri)
        if resource is None:
            raise MCPNotFoundError("Resource")

        return await resource.invoke({})

    async def _handle_list_tools(self, request: MCPRequest) -> Dict[str, Any]:
        return {"tools": list(self.registry.list(EntryKind.TOOL))}

    async def _handle_invoke_tool(self, request: MCPRequest) -> Dict[str, Any]:
        """Handle tools/invoke (and its tools/call spelling)."""
        name = self._require_string(request, "name")

        tool = self.registry.get(EntryKind.TOOL, name)
        if tool is None:
            raise MCPNotFoundError("Tool")

        params = request.parameters
        arguments = params.get("parameters")
        if arguments is None:
            arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MCPValidationError("Tool parameters must be an object")

        logger.info("Calling tool", tool_name=name)
        return await tool.invoke(arguments)

    async def _handle_list_prompts(self, request: MCPRequest) -> Dict[str, Any]:
        return {"prompts": list(self.registry.list(EntryKind.PROMPT))}

    async def _handle_get_prompt(self, request: MCPRequest) -> Dict[str, Any]:
        name = self._require_string(request, "name")

        prompt = self.registry.get(EntryKind.PROMPT, name)
        if prompt is None:
            raise MCPNotFoundError("Prompt")

        return await prompt.invoke({})

    @staticmethod
    def _require_string(request: MCPRequest, field: str) -> str:
        value = request.parameters.get(field)
        if not isinstance(value, str):
            raise MCPValidationError(
                f"Missing required parameter: {field}",
                data={"missing_parameter": field},
            )
        return value
