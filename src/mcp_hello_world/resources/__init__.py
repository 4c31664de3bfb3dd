"""
MCP resources served by the hello world server.

Static resources are registry entries keyed by URI; dynamic resources
are synthesised from a URI prefix at request time.
"""

from .base import BaseResource, DynamicResource
from .greeting import GREETING_URI_PREFIX, GreetingResource
from .hello_world import HelloWorldResource

__all__ = [
    "BaseResource",
    "DynamicResource",
    "GreetingResource",
    "GREETING_URI_PREFIX",
    "HelloWorldResource",
]
