"""Fan-out of change signals to connected live-update clients."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Protocol

from starlette.websockets import WebSocket

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 16


class ChangeSignal(str, Enum):
    """Content-free notification: re-fetch whatever you are showing."""

    UPDATE = "update"

    def payload(self) -> str:
        return json.dumps({"type": self.value})


class Subscriber(Protocol):
    label: str

    def offer(self, payload: str) -> bool: ...

    async def close(self) -> None: ...


class LiveClient:
    """One WebSocket connection with a bounded outbound queue.

    The hub only ever enqueues; the connection's own writer (``pump``) does
    the socket I/O, so a stalled peer cannot hold up the fan-out.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._ws = websocket
        self._outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._closed = False
        client = websocket.client
        self.label = f"{client.host}:{client.port}" if client else "unknown"

    def offer(self, payload: str) -> bool:
        if self._closed:
            return False
        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    async def pump(self) -> None:
        """Write queued payloads to the socket until a send fails."""
        while True:
            payload = await self._outbox.get()
            await self._ws.send_text(payload)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._ws.close()
        except (RuntimeError, OSError) as e:
            logger.debug("Close of client %s failed: %s", self.label, e)


class BroadcastHub:
    """Owns the client registry and the single fan-out worker."""

    CLOSE_TIMEOUT = 5  # seconds, on stop

    def __init__(self):
        self._clients: set[Subscriber] = set()
        self._lock = asyncio.Lock()
        self._signals: asyncio.Queue[ChangeSignal] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self._closing: set[asyncio.Task] = set()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Broadcast hub started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        async with self._lock:
            clients = list(self._clients)
            self._clients.clear()
        for client in clients:
            self._close_later(client)
        if self._closing:
            _, pending = await asyncio.wait(set(self._closing), timeout=self.CLOSE_TIMEOUT)
            for task in pending:
                task.cancel()
        logger.info("Broadcast hub stopped")

    async def register(self, client: Subscriber) -> None:
        async with self._lock:
            self._clients.add(client)
        logger.info("Client %s connected (%d live)", client.label, self.client_count)

    async def unregister(self, client: Subscriber) -> None:
        async with self._lock:
            if client not in self._clients:
                return
            self._clients.discard(client)
        logger.info("Client %s disconnected (%d live)", client.label, self.client_count)

    def publish(self, signal: ChangeSignal = ChangeSignal.UPDATE) -> None:
        """Queue a signal for fan-out. Never blocks the caller."""
        self._signals.put_nowait(signal)

    async def broadcast(self, payload: str) -> int:
        """Offer ``payload`` to every client; returns how many accepted it.

        A client that cannot take the payload is dropped and closed in the
        background; the others still receive it.
        """
        async with self._lock:
            clients = list(self._clients)

        delivered = 0
        dead: list[Subscriber] = []
        for client in clients:
            if client.offer(payload):
                delivered += 1
            else:
                dead.append(client)

        for client in dead:
            logger.warning("Dropping client %s: push failed", client.label)
            await self.unregister(client)
            self._close_later(client)
        return delivered

    def _close_later(self, client: Subscriber) -> None:
        # A stalled peer can sit in the closing handshake; fan-out must not wait on it
        task = asyncio.create_task(client.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _run_loop(self) -> None:
        while True:
            signal = await self._signals.get()
            try:
                await self.broadcast(signal.payload())
            except Exception as e:
                logger.error("Broadcast error: %s", e)
