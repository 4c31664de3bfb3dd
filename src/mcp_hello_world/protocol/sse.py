"""
Server-Sent Events broadcasting for the HTTP transport.

The broadcaster owns the set of connected clients. Each client gets a
bounded queue of pre-formatted events that its connection handler
drains onto the wire, so a slow or dead client never blocks a
broadcast to the others.
"""

import asyncio
import json
import time
import uuid
from typing import Any, AsyncIterator, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)

KEEPALIVE_COMMENT = ": keepalive\n\n"


class SSEClientClosed(Exception):
    """Raised when pushing to a client that has been closed."""

    pass


def format_sse_event(event: str, data: Any) -> str:
    """Format one event in text/event-stream framing."""
    return f"event: {event}\ndata: {json.dumps(data, separators=(',', ':'))}\n\n"


class SSEClient:
    """
    One connected event-stream listener.

    Holds the originating request and a bounded queue of formatted
    events. Closing wakes the writer so the connection handler returns.
    """

    def __init__(self, request: Any = None, max_queue_size: int = 100):
        self.client_id = str(uuid.uuid4())
        self.request = request
        self.connected_at = time.time()
        self.events_sent = 0
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Events queued but not yet written."""
        return self._queue.qsize()

    def push(self, event: str, data: Any) -> None:
        """
        Queue an event for this client.

        Raises:
            SSEClientClosed: If the client has been closed
            asyncio.QueueFull: If the client is not keeping up
        """
        if self._closed:
            raise SSEClientClosed(self.client_id)
        self._queue.put_nowait(format_sse_event(event, data))

    def close(self) -> None:
        """Mark the client closed and wake its writer."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # The writer will observe the closed flag after its next event
            pass

    async def messages(self, keepalive_seconds: Optional[float] = None) -> AsyncIterator[str]:
        """
        Yield formatted events until the client is closed.

        A keep-alive comment is yielded whenever no event arrives within
        keepalive_seconds.
        """
        while not self._closed:
            try:
                if keepalive_seconds:
                    message = await asyncio.wait_for(self._queue.get(), keepalive_seconds)
                else:
                    message = await self._queue.get()
            except asyncio.TimeoutError:
                yield KEEPALIVE_COMMENT
                continue

            if message is None or self._closed:
                break

            self.events_sent += 1
            yield message


class SSEBroadcaster:
    """
    Coordinator for event-stream listeners.

    Registration and removal are serialized by a lock; broadcasts
    iterate a snapshot of the client set, so clients may come and go
    during a broadcast without error.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._clients: Dict[str, SSEClient] = {}
        self._lock = asyncio.Lock()

        # Statistics
        self._events_broadcast = 0
        self._deliveries = 0
        self._dropped_clients = 0

    async def register(self, request: Any = None) -> SSEClient:
        """Register a new client for the given connection."""
        client = SSEClient(request, max_queue_size=self.max_queue_size)
        async with self._lock:
            self._clients[client.client_id] = client

        logger.info("SSE client connected", client_id=client.client_id, clients=len(self._clients))
        return client

    async def deregister(self, client: SSEClient) -> bool:
        """
        Remove and close a client.

        Returns:
            True if the client was registered
        """
        async with self._lock:
            removed = self._clients.pop(client.client_id, None) is not None
        client.close()

        if removed:
            logger.info(
                "SSE client disconnected",
                client_id=client.client_id,
                events_sent=client.events_sent,
                clients=len(self._clients),
            )
        return removed

    async def broadcast(self, event: str, data: Any) -> int:
        """
        Push an event to every registered client.

        A client that cannot accept the event is dropped; delivery to the
        others continues.

        Returns:
            Number of clients the event was queued for
        """
        async with self._lock:
            snapshot: List[SSEClient] = list(self._clients.values())

        delivered = 0
        failed: List[SSEClient] = []
        for client in snapshot:
            try:
                client.push(event, data)
                delivered += 1
            except (SSEClientClosed, asyncio.QueueFull) as e:
                logger.warning(
                    "Dropping SSE client after push failure",
                    client_id=client.client_id,
                    error=type(e).__name__,
                )
                failed.append(client)

        for client in failed:
            if await self.deregister(client):
                self._dropped_clients += 1

        self._events_broadcast += 1
        self._deliveries += delivered

        logger.debug("Broadcast event", sse_event=event, delivered=delivered, dropped=len(failed))
        return delivered

    async def close_all(self) -> int:
        """Close and remove every client. Returns how many were closed."""
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        for client in clients:
            client.close()

        if clients:
            logger.info("Closed SSE clients", count=len(clients))
        return len(clients)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def get_stats(self) -> Dict[str, Any]:
        """Broadcast statistics."""
        return {
            "clients": len(self._clients),
            "events_broadcast": self._events_broadcast,
            "deliveries": self._deliveries,
            "dropped_clients": self._dropped_clients,
        }
