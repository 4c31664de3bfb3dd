"""
MCP Hello World Server

A minimal Model Context Protocol server exposing a hello world resource,
an echo tool, a debug tool and a helpful-assistant prompt over stdio or
HTTP with Server-Sent Events.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config.settings import Config, load_config
from .registry import EntryKind, Registry, create_default_registry
from .server import HelloWorldMCPServer

__all__ = [
    "HelloWorldMCPServer",
    "Config",
    "load_config",
    "EntryKind",
    "Registry",
    "create_default_registry",
    "__version__",
    "__license__",
]
