#!/usr/bin/env python3
"""
Basic usage example for the MCP Hello World server.

Drives the protocol handler directly, without a transport, to show the
request/response shapes for each built-in resource, tool and prompt.
"""

import asyncio
import json
import sys
from pathlib import Path

# Add the src directory to the path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcp_hello_world.config.settings import Config
from mcp_hello_world.protocol.schemas import MCPRequest
from mcp_hello_world.server import HelloWorldMCPServer


async def main():
    """Run a scripted MCP session against the handler."""
    print("🚀 Starting MCP Hello World handler test")

    server = HelloWorldMCPServer(Config(server={"log_level": "DEBUG"}))
    handler = server.mcp_handler

    requests = [
        ("initialize", {}),
        ("resources/list", {}),
        ("resources/get", {"uri": "hello://world"}),
        ("resources/get", {"uri": "greeting://Alice"}),
        ("tools/list", {}),
        ("tools/call", {"name": "echo", "arguments": {"message": "from the example"}}),
        ("tools/invoke", {"name": "debug"}),
        ("prompts/get", {"name": "helpful-assistant"}),
        ("resources/get", {"uri": "missing://resource"}),
    ]

    for request_id, (method, params) in enumerate(requests, start=1):
        print(f"\n📤 {method} {json.dumps(params)}")
        response = await handler.handle_request(
            MCPRequest(id=request_id, method=method, params=params)
        )
        marker = "❌" if response.error else "✅"
        print(f"{marker} {json.dumps(response.model_dump(), indent=2)}")

    print("\n🎉 Example completed")


if __name__ == "__main__":
    asyncio.run(main())
