"""
Configuration management for the MCP Hello World server.

Handles loading, validation, and management of server configuration
from files and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TRANSPORT_MODES = ("stdio", "http")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServerConfig(BaseModel):
    """Configuration for MCP server behavior."""

    name: str = Field(default="mcp-hello-world", description="Server name reported on initialize")
    version: str = Field(default="1.0.0", description="Server version reported on initialize")
    log_level: str = Field(default="INFO", description="Logging level")
    verbose: bool = Field(default=False, description="Verbose (debug) logging")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {list(LOG_LEVELS)}")
        return v_upper

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level


class TransportConfig(BaseModel):
    """Configuration for the transport selected at startup."""

    mode: str = Field(default="stdio", description="Transport mode: stdio or http")
    host: str = Field(default="localhost", description="HTTP bind host")
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP bind port")
    sse_keepalive_seconds: float = Field(
        default=15.0, gt=0, description="Idle interval before an SSE keep-alive comment"
    )
    sse_queue_size: int = Field(default=100, ge=1, description="Pending events per SSE client")
    cors_origin: Optional[str] = Field(
        default="*", description="Access-Control-Allow-Origin value (null disables)"
    )

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Validate transport mode."""
        v_lower = v.lower()
        if v_lower not in TRANSPORT_MODES:
            raise ValueError(f'Mode must be either "stdio" or "http", got {v!r}')
        return v_lower


class Config(BaseModel):
    """Main configuration object."""

    model_config = ConfigDict(extra="forbid")

    version: str = Field(default="0.1.0", description="Configuration version")
    server: ServerConfig = Field(default_factory=ServerConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to configuration file. If None, looks for
                    MCP_CONFIG_PATH environment variable.

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        env_path = os.getenv("MCP_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)

    config_data: Dict[str, Any] = {}
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            config_data = json.load(f)
    elif config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    env_overrides: Dict[str, Any] = {}

    log_level = os.getenv("MCP_LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("server", {})["log_level"] = log_level

    verbose = os.getenv("MCP_VERBOSE")
    if verbose:
        env_overrides.setdefault("server", {})["verbose"] = verbose.lower() in ("1", "true", "yes")

    for env_var, key in (("MCP_MODE", "mode"), ("MCP_HOST", "host"), ("MCP_PORT", "port")):
        value = os.getenv(env_var)
        if value:
            env_overrides.setdefault("transport", {})[key] = value

    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)

    return Config(**config_data)


def create_default_config(config_path: Path) -> None:
    """
    Create a default configuration file.

    Args:
        config_path: Path where to create the configuration file
    """
    default_config = Config().model_dump()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(default_config, f, indent=2)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
