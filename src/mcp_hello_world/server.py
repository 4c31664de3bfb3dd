"""
Main MCP Hello World server implementation.

Builds the registry and protocol handler once and runs them behind
the transport chosen by configuration.
"""

import asyncio
import signal
import sys
from typing import Any, Dict, Optional, Union

import structlog

from .config.settings import Config
from .protocol.handlers import MCPHandler
from .protocol.schemas import ServerInfo
from .protocol.sse import SSEBroadcaster
from .protocol.transport import HttpTransport, StdioTransport
from .registry import EntryKind, Registry, create_default_registry

logger = structlog.get_logger(__name__)


class HelloWorldMCPServer:
    """
    MCP server exposing the hello world resources, tools and prompts.

    One registry and one handler serve whichever transport is active.
    """

    def __init__(self, config: Config, registry: Optional[Registry] = None):
        """
        Initialize the MCP server.

        Args:
            config: Server configuration
            registry: Pre-built registry (defaults to the built-in entries)
        """
        self.config = config
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._transport_task: Optional[asyncio.Task] = None

        self.registry = registry or create_default_registry()
        self.mcp_handler = MCPHandler(
            self.registry,
            server_info=ServerInfo(
                name=config.server.name,
                version=config.server.version,
            ),
        )
        self.transport = self._create_transport()

    @property
    def mode(self) -> str:
        return self.config.transport.mode

    def _create_transport(self) -> Union[StdioTransport, HttpTransport]:
        transport_config = self.config.transport

        if transport_config.mode == "http":
            return HttpTransport(
                host=transport_config.host,
                port=transport_config.port,
                broadcaster=SSEBroadcaster(max_queue_size=transport_config.sse_queue_size),
                keepalive_seconds=transport_config.sse_keepalive_seconds,
                cors_origin=transport_config.cors_origin,
            )
        return StdioTransport()

    async def start(self) -> None:
        """Wire the handler into the transport and start it."""
        if self._running:
            return

        logger.info("Starting MCP Hello World server", mode=self.mode)

        self.transport.set_message_handler(self.mcp_handler.handle_request)

        if isinstance(self.transport, HttpTransport):
            await self.transport.start()
        else:
            self._transport_task = asyncio.create_task(self.transport.start())

        self._running = True
        logger.info("Server started successfully", **self.status())

    async def stop(self) -> None:
        """Stop the transport, letting in-flight responses flush."""
        if not self._running:
            return

        logger.info("Stopping MCP Hello World server")
        self._running = False
        self._shutdown_event.set()

        await self.transport.stop()

        if self._transport_task and not self._transport_task.done():
            self._transport_task.cancel()
            try:
                await self._transport_task
            except asyncio.CancelledError:
                pass

        logger.info("Server stopped")

    def request_shutdown(self) -> None:
        """Ask a running server to shut down."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()

    async def run(self) -> None:
        """
        Run until shutdown is requested or, for stdio, input ends.

        Errors from the transport propagate after cleanup.
        """
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop)

        try:
            await self.start()

            shutdown_waiter = asyncio.create_task(self._shutdown_event.wait())
            waiters = {shutdown_waiter}
            if self._transport_task is not None:
                waiters.add(self._transport_task)

            try:
                await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            finally:
                shutdown_waiter.cancel()

            if self._transport_task is not None and self._transport_task.done():
                # Surface stream I/O errors
                self._transport_task.result()

        finally:
            await self.stop()
            for sig in installed:
                loop.remove_signal_handler(sig)

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list:
        """Set up signal handlers for graceful shutdown."""
        if sys.platform == "win32":
            return []

        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_shutdown)
            installed.append(sig)
        return installed

    @property
    def running(self) -> bool:
        """Check if server is running."""
        return self._running

    def status(self) -> Dict[str, Any]:
        """Basic server status."""
        status: Dict[str, Any] = {
            "running": self._running,
            "mode": self.mode,
            "resources": self.registry.count(EntryKind.RESOURCE),
            "tools": self.registry.count(EntryKind.TOOL),
            "prompts": self.registry.count(EntryKind.PROMPT),
        }
        if isinstance(self.transport, HttpTransport):
            status["url"] = f"http://{self.transport.host}:{self.transport.port}"
            status["sse"] = self.transport.broadcaster.get_stats()
        return status
