"""
Deletion Relay - Lets node views ask for their own removal.

A node view does not own the registries. Instead it is given the relay's
`request_deletion` callable and emits a `deleteNode` request carrying only its
node ID. Requests are queued and delivered asynchronously to the single
subscribed handler, normally `MindMapManager.delete_node`.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DELETE_NODE_EVENT = "deleteNode"


@dataclass(frozen=True)
class DeleteNodeRequest:
    """Payload of a deleteNode request."""
    id: str

    def to_dict(self) -> dict:
        return {"type": DELETE_NODE_EVENT, "id": self.id}


class DeletionRelay:
    """
    Queue of deletion requests with exactly one consumer.

    Usage:
        unsubscribe = relay.subscribe(manager.delete_node)
        relay.request_deletion("3")   # fire-and-forget
        await relay.drain()           # or run() as a background task
        unsubscribe()
    """

    def __init__(self):
        self._queue: asyncio.Queue[DeleteNodeRequest] = asyncio.Queue()
        self._handler: Optional[Callable[[str], object]] = None

    @property
    def has_subscriber(self) -> bool:
        return self._handler is not None

    @property
    def pending(self) -> int:
        """Number of requests not yet delivered."""
        return self._queue.qsize()

    def subscribe(self, handler: Callable[[str], object]) -> Callable[[], None]:
        """
        Register the handler that performs deletions.

        Returns:
            A function that removes the subscription

        Raises:
            RuntimeError: if another handler is already subscribed
        """
        if self._handler is not None:
            raise RuntimeError("Deletion relay already has a subscriber")
        self._handler = handler

        def unsubscribe() -> None:
            if self._handler is handler:
                self._handler = None

        return unsubscribe

    def request_deletion(self, node_id: str) -> None:
        """Queue a deletion request. Returns immediately."""
        self._queue.put_nowait(DeleteNodeRequest(id=node_id))

    def _deliver(self, request: DeleteNodeRequest) -> None:
        if self._handler is None:
            logger.warning("Dropping %s request for node %s: no subscriber",
                           DELETE_NODE_EVENT, request.id)
            return
        self._handler(request.id)

    async def drain(self) -> int:
        """Deliver every queued request. Returns how many were processed."""
        delivered = 0
        while not self._queue.empty():
            self._deliver(self._queue.get_nowait())
            self._queue.task_done()
            delivered += 1
        return delivered

    async def run(self) -> None:
        """Deliver requests as they arrive, until cancelled."""
        while True:
            request = await self._queue.get()
            try:
                self._deliver(request)
            except Exception:
                logger.exception("Deletion handler failed for node %s", request.id)
            finally:
                self._queue.task_done()
