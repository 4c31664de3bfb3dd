"""
Base class for MCP prompts.
"""

from abc import abstractmethod
from typing import Any, Dict, List

from ..registry import EntryKind, RegistryEntry


class BasePrompt(RegistryEntry):
    """
    Base class for parameterless prompts returning a scripted conversation.
    """

    kind = EntryKind.PROMPT

    name: str = ""
    description: str = ""

    @property
    def key(self) -> str:
        return self.name

    def summary(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @abstractmethod
    def get_messages(self) -> List[Dict[str, Any]]:
        """Conversation messages making up the prompt."""
        pass

    async def invoke(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        return {"messages": self.get_messages()}

    @staticmethod
    def _message(role: str, text: str) -> Dict[str, Any]:
        return {"role": role, "content": {"type": "text", "text": text}}
