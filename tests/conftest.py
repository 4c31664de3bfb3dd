"""
Pytest configuration and fixtures for MCP Hello World server tests.
"""

import pytest

from mcp_hello_world.config.settings import Config, ServerConfig, TransportConfig
from mcp_hello_world.protocol.handlers import MCPHandler
from mcp_hello_world.protocol.schemas import MCPRequest
from mcp_hello_world.registry import create_default_registry


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return Config(
        version="0.1.0-test",
        server=ServerConfig(log_level="DEBUG"),
        transport=TransportConfig(mode="stdio", host="127.0.0.1", port=3000),
    )


@pytest.fixture
def registry():
    """Registry populated with the built-in entries."""
    return create_default_registry()


@pytest.fixture
def handler(registry):
    """MCP handler over the default registry."""
    return MCPHandler(registry)


@pytest.fixture
def make_request():
    """Factory for MCP requests."""

    def _make(method, params=None, request_id=1):
        return MCPRequest(id=request_id, method=method, params=params)

    return _make
