"""
Unit tests for MCP protocol implementation.
"""

import json

import pytest

from mcp_hello_world.protocol.handlers import MCPHandler
from mcp_hello_world.protocol.schemas import (
    MCPParseError,
    MCPRequest,
    MCPResponse,
    parse_request,
)
from mcp_hello_world.registry import EntryKind
from mcp_hello_world.tools.base import BaseTool, ToolResult


class ExplodingTool(BaseTool):
    """Tool whose execution always fails."""

    name = "explode"
    description = "Always raises"

    def get_schema(self):
        return self._create_schema(parameters={}, required=[])

    async def execute(self, arguments):
        raise RuntimeError("secret internal detail")


class TestMCPHandler:
    """Test MCP protocol handler."""

    def test_routed_methods(self, handler):
        assert set(handler.methods) == {
            "initialize",
            "resources/list",
            "resources/get",
            "resources/read",
            "tools/list",
            "tools/invoke",
            "tools/call",
            "prompts/list",
            "prompts/get",
        }

    @pytest.mark.asyncio
    async def test_handle_initialize(self, handler, make_request):
        """Test initialize request handling."""
        response = await handler.handle_request(make_request("initialize", {}))

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "protocolVersion": "2024-11-05",
                "capabilities": {
                    "resources": {"subscribe": False, "listChanged": False},
                    "tools": {"listChanged": False},
                    "prompts": {"listChanged": False},
                },
                "serverInfo": {"name": "mcp-hello-world", "version": "1.0.0"},
            },
        }

    @pytest.mark.asyncio
    async def test_initialize_without_params(self, handler):
        """Test initialize with no params at all."""
        response = await handler.handle_request(MCPRequest(id="init", method="initialize"))

        assert response.error is None
        assert response.result["protocolVersion"] == "2024-11-05"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_id", [1, 0, "abc", "", None])
    async def test_response_echoes_request_id(self, handler, request_id):
        """Test that known methods echo the request id exactly."""
        request = MCPRequest(id=request_id, method="tools/list")

        response = await handler.handle_request(request)

        assert response.id == request_id
        assert response.model_dump()["id"] == request_id

    @pytest.mark.asyncio
    async def test_list_resources(self, handler, make_request):
        response = await handler.handle_request(make_request("resources/list", {}))

        assert response.result == {
            "resources": [
                {
                    "uri": "hello://world",
                    "name": "Hello World",
                    "description": "A static Hello World resource",
                }
            ]
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["resources/get", "resources/read"])
    async def test_get_static_resource(self, handler, make_request, method):
        response = await handler.handle_request(make_request(method, {"uri": "hello://world"}))

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {"data": "Hello World!"},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Alice", "Bob Smith", "", "<b>&amp;</b>", "a/b?c=d"])
    async def test_get_dynamic_greeting(self, handler, make_request, name):
        """Test that greeting URIs render the suffix verbatim."""
        response = await handler.handle_request(
            make_request("resources/get", {"uri": f"greeting://{name}"})
        )

        assert response.result == {"data": f"Hello {name}!"}

    @pytest.mark.asyncio
    async def test_get_missing_resource(self, handler, make_request):
        response = await handler.handle_request(
            make_request("resources/get", {"uri": "nonexistent://resource"})
        )

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32602, "message": "Resource not found"},
        }

    @pytest.mark.asyncio
    async def test_get_resource_without_uri(self, handler, make_request):
        response = await handler.handle_request(make_request("resources/get", {}))

        assert response.error["code"] == -32602
        assert "uri" in response.error["message"]

    @pytest.mark.asyncio
    async def test_positional_params_reach_dispatch(self, handler):
        """Test that array params keep the request id."""
        request = parse_request('{"jsonrpc": "2.0", "id": 7, "method": "tools/list", "params": []}')

        response = await handler.handle_request(request)

        assert request.params == []
        assert request.parameters == {}
        assert response.id == 7
        assert response.error is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["resources/get", "tools/invoke", "prompts/get"])
    async def test_positional_params_are_invalid_params(self, handler, method):
        request = parse_request(
            json.dumps({"jsonrpc": "2.0", "id": "pos", "method": method, "params": ["hello://world"]})
        )

        response = await handler.handle_request(request)

        assert response.id == "pos"
        assert response.error["code"] == -32602

    @pytest.mark.asyncio
    async def test_list_tools(self, handler, make_request):
        response = await handler.handle_request(make_request("tools/list", {}))

        tools = {tool["name"]: tool for tool in response.result["tools"]}
        assert set(tools) == {"echo", "debug"}
        assert tools["echo"]["inputSchema"] == {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        }
        assert tools["debug"]["inputSchema"] == {"type": "object", "properties": {}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["tools/invoke", "tools/call"])
    async def test_invoke_echo(self, handler, make_request, method):
        response = await handler.handle_request(
            make_request(method, {"name": "echo", "parameters": {"message": "test message"}})
        )

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {"content": [{"type": "text", "text": "Hello test message"}]},
        }

    @pytest.mark.asyncio
    async def test_invoke_echo_with_arguments_key(self, handler, make_request):
        """Test the MCP 'arguments' spelling of tool parameters."""
        response = await handler.handle_request(
            make_request("tools/call", {"name": "echo", "arguments": {"message": "there"}})
        )

        assert response.result["content"] == [{"type": "text", "text": "Hello there"}]

    @pytest.mark.asyncio
    async def test_invoke_echo_missing_message(self, handler, make_request):
        response = await handler.handle_request(make_request("tools/invoke", {"name": "echo"}))

        assert response.error["code"] == -32602
        assert "message" in response.error["message"]

    @pytest.mark.asyncio
    async def test_invoke_with_non_object_parameters(self, handler, make_request):
        response = await handler.handle_request(
            make_request("tools/invoke", {"name": "echo", "parameters": ["x"]})
        )

        assert response.error["code"] == -32602

    @pytest.mark.asyncio
    async def test_invoke_debug(self, handler, registry, make_request):
        """Test that debug output matches the registry contents."""
        response = await handler.handle_request(
            make_request("tools/invoke", {"name": "debug"})
        )

        content = response.result["content"]
        assert len(content) == 1
        assert content[0]["type"] == "text"

        debug_info = json.loads(content[0]["text"])
        assert debug_info["resources"] == ["hello://world"]
        assert len(debug_info["resources"]) == registry.count(EntryKind.RESOURCE)
        assert len(debug_info["tools"]) == registry.count(EntryKind.TOOL)
        assert len(debug_info["prompts"]) == registry.count(EntryKind.PROMPT)
        assert {"name": "echo", "description": 'Echoes the input message, prefixed with "Hello "'} in debug_info["tools"]

    @pytest.mark.asyncio
    async def test_invoke_missing_tool(self, handler, make_request):
        response = await handler.handle_request(
            make_request("tools/call", {"name": "nonexistent", "parameters": {}})
        )

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32602, "message": "Tool not found"},
        }

    @pytest.mark.asyncio
    async def test_list_prompts(self, handler, make_request):
        response = await handler.handle_request(make_request("prompts/list", {}))

        assert response.result == {
            "prompts": [
                {
                    "name": "helpful-assistant",
                    "description": "A basic assistant prompt definition",
                }
            ]
        }

    @pytest.mark.asyncio
    async def test_get_prompt(self, handler, make_request):
        response = await handler.handle_request(
            make_request("prompts/get", {"name": "helpful-assistant"})
        )

        messages = response.result["messages"]
        assert [message["role"] for message in messages] == ["system", "user"]
        assert messages[0]["content"] == {"type": "text", "text": "You are a helpful assistant."}

    @pytest.mark.asyncio
    async def test_get_missing_prompt(self, handler, make_request):
        response = await handler.handle_request(
            make_request("prompts/get", {"name": "nonexistent"})
        )

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32602, "message": "Prompt not found"},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["unknown/method", "tools", "", "notifications/initialized"])
    async def test_handle_unknown_method(self, handler, make_request, method):
        """Test handling of unknown method."""
        response = await handler.handle_request(make_request(method, {}))

        assert response.model_dump() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32601, "message": "Method not found"},
        }

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_internal_error(self, registry, make_request):
        """Test that entry failures are reported without internal detail."""
        registry.register(EntryKind.TOOL, ExplodingTool())
        handler = MCPHandler(registry)

        response = await handler.handle_request(make_request("tools/invoke", {"name": "explode"}))

        assert response.error == {"code": -32603, "message": "Internal error"}
        assert "secret" not in json.dumps(response.model_dump())

    @pytest.mark.asyncio
    async def test_custom_tool_is_listed_and_invoked(self, registry, make_request):
        class ShoutTool(BaseTool):
            name = "shout"
            description = "Upper-cases text"

            def get_schema(self):
                return self._create_schema(
                    parameters={"text": self._create_parameter("string", "Text to shout")},
                    required=["text"],
                )

            async def execute(self, arguments):
                return ToolResult.text(arguments["text"].upper())

        registry.register(EntryKind.TOOL, ShoutTool())
        handler = MCPHandler(registry)

        listed = await handler.handle_request(make_request("tools/list"))
        invoked = await handler.handle_request(
            make_request("tools/invoke", {"name": "shout", "parameters": {"text": "hi"}})
        )

        assert "shout" in [tool["name"] for tool in listed.result["tools"]]
        assert invoked.result["content"][0]["text"] == "HI"


class TestParseRequest:
    """Test request parsing."""

    def test_parse_valid_request(self):
        request = parse_request('{"jsonrpc": "2.0", "id": 5, "method": "tools/list"}')

        assert request.id == 5
        assert request.method == "tools/list"
        assert request.params is None
        assert request.parameters == {}

    def test_parse_request_without_id(self):
        request = parse_request({"jsonrpc": "2.0", "method": "prompts/list"})

        assert request.id is None

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{",
            "[1, 2]",
            '"a string"',
            '{"jsonrpc": "2.0", "id": 1}',
            '{"jsonrpc": "2.0", "id": 1, "method": 42}',
            '{"jsonrpc": "2.0", "id": 1, "method": "x", "params": 5}',
            '{"jsonrpc": "2.0", "id": true, "method": "initialize"}',
            '{"jsonrpc": "2.0", "id": 1.5, "method": "initialize"}',
        ],
    )
    def test_parse_failures(self, raw):
        with pytest.raises(MCPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.code == -32700
        assert exc_info.value.to_dict() == {"code": -32700, "message": "Parse error"}


class TestMCPResponse:
    """Test response envelopes."""

    def test_success_omits_error(self):
        dumped = MCPResponse.success(3, {"ok": True}).model_dump()

        assert dumped == {"jsonrpc": "2.0", "id": 3, "result": {"ok": True}}

    def test_failure_omits_result(self):
        dumped = MCPResponse.failure(None, MCPParseError()).model_dump()

        assert dumped == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error"},
        }

    def test_to_json_is_single_line(self):
        text = MCPResponse.success("a", {"text": "line1\nline2"}).to_json()

        assert "\n" not in text
        assert json.loads(text)["result"]["text"] == "line1\nline2"
