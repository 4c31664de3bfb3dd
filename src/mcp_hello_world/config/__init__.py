"""Configuration management."""

from .settings import Config, ServerConfig, TransportConfig, create_default_config, load_config

__all__ = ["Config", "ServerConfig", "TransportConfig", "load_config", "create_default_config"]
