"""
Registry of MCP resources, tools and prompts.

Each entry kind lives in its own namespace, keyed by resource URI,
tool name or prompt name. Entries are registered once at startup and
only read afterwards.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Iterator, Optional

import structlog

logger = structlog.get_logger(__name__)


class EntryKind(str, Enum):
    """Registry namespaces."""

    RESOURCE = "resource"
    TOOL = "tool"
    PROMPT = "prompt"


class RegistryEntry(ABC):
    """
    Common interface for everything the registry holds.

    Listing goes through summary() and never touches invoke(), so
    entries can be introspected without being executed.
    """

    kind: EntryKind
    description: str = ""

    @property
    @abstractmethod
    def key(self) -> str:
        """Lookup key within the entry's namespace."""
        pass

    @abstractmethod
    def summary(self) -> Dict[str, Any]:
        """Listing metadata, without any handler reference."""
        pass

    @abstractmethod
    async def invoke(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Produce the entry's result payload."""
        pass


class Registry:
    """In-memory registry with one mapping per entry kind."""

    def __init__(self):
        self._entries: Dict[EntryKind, Dict[str, RegistryEntry]] = {
            kind: {} for kind in EntryKind
        }

    def register(self, kind: EntryKind, entry: RegistryEntry) -> None:
        """
        Insert or overwrite an entry.

        Args:
            kind: Namespace to register into
            entry: Entry to store under entry.key

        Raises:
            ValueError: If the entry does not belong to the namespace
        """
        if entry.kind is not kind:
            raise ValueError(f"Cannot register {entry.kind.value} entry as {kind.value}")

        replaced = entry.key in self._entries[kind]
        self._entries[kind][entry.key] = entry
        logger.debug("Registered entry", kind=kind.value, key=entry.key, replaced=replaced)

    def get(self, kind: EntryKind, key: str) -> Optional[RegistryEntry]:
        """Get an entry by key, or None if it is not registered."""
        return self._entries[kind].get(key)

    def list(self, kind: EntryKind) -> Iterator[Dict[str, Any]]:
        """Lazily yield summaries for every entry of a kind."""
        for entry in self._entries[kind].values():
            yield entry.summary()

    def keys(self, kind: EntryKind) -> Iterator[str]:
        """Lazily yield the keys of a kind."""
        return iter(self._entries[kind])

    def count(self, kind: EntryKind) -> int:
        """Number of entries of a kind."""
        return len(self._entries[kind])

    def __contains__(self, item: Any) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        kind, key = item
        return key in self._entries.get(kind, {})


def create_default_registry() -> Registry:
    """Build the registry with the built-in resources, tools and prompts."""
    from .prompts import HelpfulAssistantPrompt
    from .resources import HelloWorldResource
    from .tools import DebugTool, EchoTool

    registry = Registry()
    registry.register(EntryKind.RESOURCE, HelloWorldResource())
    registry.register(EntryKind.TOOL, EchoTool())
    registry.register(EntryKind.TOOL, DebugTool(registry))
    registry.register(EntryKind.PROMPT, HelpfulAssistantPrompt())

    logger.info(
        "Registry populated",
        resources=registry.count(EntryKind.RESOURCE),
        tools=registry.count(EntryKind.TOOL),
        prompts=registry.count(EntryKind.PROMPT),
    )
    return registry
