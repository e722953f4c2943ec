"""
WebSocket fan-out for canvas clients.

Canvases subscribe here for mindmap_updated events, sent after any state
change, and attachment_rejected events, one per refused or unreadable file.
"""
import asyncio
import json
import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Tracks open canvas sockets and pushes JSON events to them."""

    def __init__(self):
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("Canvas subscribed (%d open)", len(self._connections))

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("Canvas unsubscribed (%d open)", len(self._connections))

    async def broadcast(self, message: dict):
        """Send one event to every canvas; sockets that fail are dropped."""
        if not self._connections:
            return

        message_text = json.dumps(message)
        failed: Set[WebSocket] = set()

        async with self._lock:
            for websocket in self._connections:
                try:
                    await websocket.send_text(message_text)
                except Exception as e:
                    logger.debug("Dropping canvas socket after failed send: %s", e)
                    failed.add(websocket)

            self._connections -= failed

    async def notify_mindmap_updated(self):
        """Canvases re-fetch GET /api/mindmap on this event."""
        await self.broadcast({"type": "mindmap_updated"})

    async def notify_attachment_rejected(self, node_id: str, notices: list[dict]):
        for notice in notices:
            await self.broadcast({
                "type": "attachment_rejected",
                "node_id": node_id,
                **notice,
            })

    @property
    def connection_count(self) -> int:
        return len(self._connections)
