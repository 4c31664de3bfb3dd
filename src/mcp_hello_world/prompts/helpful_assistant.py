"""
Helpful assistant prompt.
"""

from typing import Any, Dict, List

from .base import BasePrompt


class HelpfulAssistantPrompt(BasePrompt):
    """System prompt and opening question for a general assistant."""

    name = "helpful-assistant"
    description = "A basic assistant prompt definition"

    def get_messages(self) -> List[Dict[str, Any]]:
        return [
            self._message("system", "You are a helpful assistant."),
            self._message("user", "How can I help you today?"),
        ]
