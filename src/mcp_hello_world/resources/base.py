"""
Base classes for MCP resources.
"""

from abc import abstractmethod
from typing import Any, Dict

import structlog

from ..registry import EntryKind, RegistryEntry

logger = structlog.get_logger(__name__)


class BaseResource(RegistryEntry):
    """
    Base class for URI-addressed resources.

    Subclasses define uri, name and description, and implement read().
    """

    kind = EntryKind.RESOURCE

    uri: str = ""
    name: str = ""
    description: str = ""

    @property
    def key(self) -> str:
        return self.uri

    def summary(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
        }

    @abstractmethod
    async def read(self) -> Dict[str, Any]:
        """
        Read the resource contents.

        Returns:
            Resource payload
        """
        pass

    async def invoke(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug("Reading resource", uri=self.uri)
        return await self.read()


class DynamicResource(BaseResource):
    """
    Resource generated from the part of a URI following a fixed prefix.

    Dynamic resources are never registered; the dispatcher builds one per
    request with from_uri().
    """

    prefix: str = ""

    def __init__(self, suffix: str):
        self.suffix = suffix
        self.uri = f"{self.prefix}{suffix}"

    @classmethod
    def matches(cls, uri: str) -> bool:
        """Check whether a URI addresses this resource type."""
        return bool(cls.prefix) and uri.startswith(cls.prefix)

    @classmethod
    def from_uri(cls, uri: str) -> "DynamicResource":
        """Build the resource for a matching URI."""
        return cls(uri[len(cls.prefix):])
