"""
Static hello world resource.
"""

from typing import Any, Dict

from .base import BaseResource


class HelloWorldResource(BaseResource):
    """The fixed hello://world resource."""

    uri = "hello://world"
    name = "Hello World"
    description = "A static Hello World resource"

    async def read(self) -> Dict[str, Any]:
        return {"data": "Hello World!"}
