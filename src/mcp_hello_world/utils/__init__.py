"""Utility modules for the MCP Hello World server."""

from .health import HealthStatus
from .logging import setup_logging

__all__ = ["HealthStatus", "setup_logging"]
