"""Live-update channel — pushes {"type": "update"} whenever the tree changes."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, status

from treeserve.api.deps import is_authenticated
from treeserve.services import get_broadcast_hub
from treeserve.services.broadcast import LiveClient

logger = logging.getLogger(__name__)
router = APIRouter()


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Read until the peer goes away; message content is ignored."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws")
async def live_updates(websocket: WebSocket):
    if not is_authenticated(websocket):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub = get_broadcast_hub()
    client = LiveClient(websocket, websocket.app.state.settings.live_client_queue_size)
    # Registered before the handshake completes so no signal after accept is missed
    await hub.register(client)
    tasks: set[asyncio.Task] = set()
    try:
        await websocket.accept()
        tasks = {
            asyncio.create_task(_wait_for_disconnect(websocket)),
            asyncio.create_task(client.pump()),
        }
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None:
                logger.info("Live connection %s ended: %s", client.label, exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await hub.unregister(client)
