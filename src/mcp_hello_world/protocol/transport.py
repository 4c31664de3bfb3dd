"""
Transport layer for MCP protocol communication.

Implements the newline-delimited stdio transport and the HTTP transport
(JSON-RPC over POST plus a Server-Sent-Events broadcast channel). Both
hand parsed requests to the same message handler.
"""

import asyncio
import codecs
import sys
from typing import Awaitable, Callable, Optional, TextIO, Union

import structlog
from aiohttp import web

from ..utils.health import HealthStatus
from .schemas import (
    MCPInternalError,
    MCPParseError,
    MCPRequest,
    MCPResponse,
    parse_request,
)
from .sse import SSEBroadcaster

logger = structlog.get_logger(__name__)

MessageHandler = Union[
    Callable[[MCPRequest], MCPResponse],
    Callable[[MCPRequest], Awaitable[MCPResponse]],
]


class TransportError(Exception):
    """Base exception for transport errors."""

    pass


async def call_message_handler(handler: MessageHandler, request: MCPRequest) -> MCPResponse:
    """Call a sync or async message handler."""
    result = handler(request)
    if asyncio.iscoroutine(result):
        return await result
    return result


class StdioTransport:
    """
    Stdio transport for MCP communication.

    Reads stdin in chunks, frames requests on newlines and writes one
    JSON response line per request to stdout. Lines are handled strictly
    in arrival order.
    """

    def __init__(
        self,
        reader: Optional[asyncio.StreamReader] = None,
        writer: Optional[TextIO] = None,
        chunk_size: int = 65536,
    ):
        self._reader = reader
        self._writer = writer
        self.chunk_size = chunk_size
        self._running = False
        self._message_handler: Optional[MessageHandler] = None
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.lines_processed = 0

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Set the message handler for incoming requests."""
        self._message_handler = handler

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> str:
        """Buffered text not yet terminated by a newline."""
        return self._buffer

    async def start(self) -> None:
        """Run the transport loop until end of input or stop()."""
        if self._running:
            raise TransportError("Transport is already running")

        if not self._message_handler:
            raise TransportError("Message handler not set")

        self._running = True
        logger.info("Starting stdio transport")

        try:
            await self._run_transport_loop()
        except Exception as e:
            logger.error("Transport loop error", error=str(e), exc_info=True)
            raise
        finally:
            self._running = False
            logger.info("Stdio transport stopped", lines_processed=self.lines_processed)

    async def stop(self) -> None:
        """Stop the stdio transport."""
        self._running = False

    async def feed(self, chunk: str) -> None:
        """
        Process a chunk of input text.

        Every complete line in the buffer is handled; the trailing
        partial line is kept for the next chunk.
        """
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")

        for line in lines:
            line = line.strip()
            if line:
                await self._process_line(line)

    async def flush(self) -> None:
        """Handle any buffered partial line as a final request."""
        remainder, self._buffer = self._buffer.strip(), ""
        if remainder:
            await self._process_line(remainder)

    async def send_response(self, response: MCPResponse) -> None:
        """Write a response as one line on stdout."""
        logger.debug(
            "Sending MCP response",
            response_id=response.id,
            has_error=response.error is not None,
        )

        writer = self._writer or sys.stdout
        try:
            writer.write(response.to_json() + "\n")
            writer.flush()
        except (OSError, ValueError) as e:
            logger.error("Failed to send message", error=str(e))
            raise TransportError(f"Failed to send message: {e}") from e

    async def _run_transport_loop(self) -> None:
        reader = self._reader or await self._connect_stdin()

        while self._running:
            chunk = await reader.read(self.chunk_size)
            if not chunk:
                logger.info("Received EOF on stdin")
                break
            await self.feed(self._decoder.decode(chunk))

        self._buffer += self._decoder.decode(b"", final=True)
        await self.flush()

    async def _connect_stdin(self) -> asyncio.StreamReader:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        return reader

    async def _process_line(self, line: str) -> None:
        """Handle one framed line: parse, dispatch, respond."""
        self.lines_processed += 1

        try:
            request = parse_request(line)
        except MCPParseError as e:
            logger.error("Invalid JSON-RPC message received", line=line[:100])
            await self.send_response(MCPResponse.failure(None, e))
            return

        logger.info("Processing request", method=request.method, request_id=request.id)
        response = await self._safe_call_handler(request)
        await self.send_response(response)

    async def _safe_call_handler(self, request: MCPRequest) -> MCPResponse:
        """Safely call the message handler with error handling."""
        try:
            return await call_message_handler(self._message_handler, request)
        except Exception as e:
            logger.error("Handler error", error=str(e), exc_info=True)
            return MCPResponse.failure(request.id, MCPInternalError())


class HttpTransport:
    """
    HTTP transport for MCP communication.

    POST /messages carries one JSON-RPC request per call. GET /sse is a
    long-lived event stream receiving a copy of every response to a
    request with a non-null id. GET /health reports liveness.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3000,
        broadcaster: Optional[SSEBroadcaster] = None,
        keepalive_seconds: Optional[float] = 15.0,
        cors_origin: Optional[str] = "*",
    ):
        self.host = host
        self.port = port
        self.broadcaster = broadcaster or SSEBroadcaster()
        self.keepalive_seconds = keepalive_seconds
        self.cors_origin = cors_origin
        self._message_handler: Optional[MessageHandler] = None
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Set the message handler for incoming requests."""
        self._message_handler = handler

    @property
    def running(self) -> bool:
        return self._runner is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application serving the MCP routes."""
        app = web.Application()
        app.router.add_get("/sse", self._handle_sse)
        app.router.add_post("/messages", self._handle_message)
        app.router.add_get("/health", self._handle_health)
        app.on_response_prepare.append(self._apply_cors)
        app.on_shutdown.append(self._close_streams)
        return app

    async def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            TransportError: If the server cannot bind
        """
        if self._runner is not None:
            raise TransportError("Transport is already running")

        if not self._message_handler:
            raise TransportError("Message handler not set")

        self._app = self.create_app()
        runner = web.AppRunner(self._app)
        await runner.setup()

        try:
            site = web.TCPSite(runner, self.host, self.port)
            await site.start()
        except OSError as e:
            await runner.cleanup()
            logger.error("Failed to bind HTTP transport", host=self.host, port=self.port, error=str(e))
            raise TransportError(f"Failed to bind {self.host}:{self.port}: {e}") from e

        self._runner = runner
        logger.info("HTTP transport listening", url=f"http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop accepting connections, close event streams and finish in-flight requests."""
        if self._runner is None:
            return

        runner, self._runner = self._runner, None
        await self.broadcaster.close_all()
        await runner.cleanup()
        logger.info("HTTP transport stopped")

    async def _handle_message(self, request: web.Request) -> web.Response:
        """Handle one JSON-RPC request posted to /messages."""
        mcp_request: Optional[MCPRequest] = None

        try:
            body = await request.read()
            try:
                mcp_request = parse_request(body)
            except MCPParseError as e:
                logger.warning("Invalid JSON-RPC message received", size=len(body))
                return self._json_response(MCPResponse.failure(None, e), status=400)

            logger.info("Processing request", method=mcp_request.method, request_id=mcp_request.id)
            response = await call_message_handler(self._message_handler, mcp_request)

            if mcp_request.id is not None:
                await self.broadcaster.broadcast("response", response.model_dump())

            return self._json_response(response)

        except Exception as e:
            logger.error("Error handling HTTP message", error=str(e), exc_info=True)
            request_id = mcp_request.id if mcp_request is not None else None
            return self._json_response(
                MCPResponse.failure(request_id, MCPInternalError()), status=500
            )

    async def _handle_sse(self, request: web.Request) -> web.StreamResponse:
        """Stream broadcast events to one listener until it disconnects."""
        response = web.StreamResponse(
            status=200,
            headers={
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )
        await response.prepare(request)

        client = await self.broadcaster.register(request)
        try:
            client.push("connected", {"message": "MCP Server connected"})
            async for message in client.messages(self.keepalive_seconds):
                await response.write(message.encode("utf-8"))
        except ConnectionError:
            logger.debug("SSE client connection lost", client_id=client.client_id)
        finally:
            await self.broadcaster.deregister(client)

        return response

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response(HealthStatus().to_dict())

    async def _apply_cors(self, request: web.Request, response: web.StreamResponse) -> None:
        if self.cors_origin:
            response.headers["Access-Control-Allow-Origin"] = self.cors_origin

    async def _close_streams(self, app: web.Application) -> None:
        await self.broadcaster.close_all()

    @staticmethod
    def _json_response(response: MCPResponse, status: int = 200) -> web.Response:
        return web.json_response(response.model_dump(), status=status)

