"""MCP prompts."""

from .base import BasePrompt
from .helpful_assistant import HelpfulAssistantPrompt

__all__ = ["BasePrompt", "HelpfulAssistantPrompt"]
