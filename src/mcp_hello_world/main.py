"""
Main entry point for the MCP Hello World server.

This module provides the command-line interface for the MCP server,
handling transport selection, configuration and startup.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from . import __version__
from .config.settings import LOG_LEVELS, TRANSPORT_MODES, load_config
from .server import HelloWorldMCPServer
from .utils.logging import setup_logging

logger = structlog.get_logger(__name__)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(TRANSPORT_MODES, case_sensitive=False),
    help="Communication mode (default: stdio)",
)
@click.option("--host", "-h", help="HTTP server host (default: localhost)")
@click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    help="HTTP server port (default: 3000)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set logging level",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__)
def main(
    config: Optional[Path] = None,
    mode: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """
    MCP Hello World server - a lightweight Model Context Protocol server
    for testing and development.

    \b
    Examples:
      mcp-hello-world                            Start in stdio mode
      mcp-hello-world --mode http                Serve HTTP on localhost:3000
      mcp-hello-world --mode http --port 8080    Serve HTTP on localhost:8080
    """
    try:
        config_data = load_config(config_path=config)

        if mode:
            config_data.transport.mode = mode.lower()
        if host:
            config_data.transport.host = host
        if port:
            config_data.transport.port = port
        if log_level:
            config_data.server.log_level = log_level.upper()
        if verbose:
            config_data.server.verbose = True

        setup_logging(config_data.server.effective_log_level)

        logger.info(
            "Starting MCP Hello World server",
            version=__version__,
            config_file=str(config) if config else "default",
            mode=config_data.transport.mode,
            log_level=config_data.server.effective_log_level,
        )

        server = HelloWorldMCPServer(config_data)
        asyncio.run(server.run())

    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as e:
        logger.error("Server failed", error=str(e), exc_info=True)
        sys.exit(1)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    help="Path to save configuration file",
)
def init_config(config: Optional[Path] = None) -> None:
    """Initialize a configuration file with default settings."""
    from .config.settings import create_default_config

    config_path = config or Path("config.json")

    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}")
        if not click.confirm("Overwrite?"):
            return

    try:
        create_default_config(config_path)
        click.echo(f"Created configuration file: {config_path}")
        click.echo("\nRun the server with:")
        click.echo(f"   mcp-hello-world --config {config_path}")
    except OSError as e:
        click.echo(f"Failed to create configuration file: {e}", err=True)
        sys.exit(1)


@click.group()
def cli() -> None:
    """MCP Hello World server CLI."""
    pass


cli.add_command(main, name="serve")
cli.add_command(init_config, name="init")


if __name__ == "__main__":
    main()
