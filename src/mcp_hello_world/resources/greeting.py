"""
Dynamic greeting resources.

greeting://<name> reads as a greeting for <name>. The name is used
verbatim; an empty name is accepted.
"""

from typing import Any, Dict

from .base import DynamicResource

GREETING_URI_PREFIX = "greeting://"


class GreetingResource(DynamicResource):
    """Greeting generated from the URI suffix."""

    prefix = GREETING_URI_PREFIX
    name = "Greeting"
    description = "A personalised greeting, addressed by greeting://<name>"

    async def read(self) -> Dict[str, Any]:
        return {"data": f"Hello {self.suffix}!"}
