"""WebSocket push channel for ``data_update`` and ``config_update`` events."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from services.notifier import Event, Notifier, build_default_notifier

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)


def get_notifier() -> Notifier:
    return build_default_notifier()


class QueueListener:
    """Hands events from any thread to one connection's event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self.queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()

    def __call__(self, event: Event) -> None:
        self._loop.call_soon_threadsafe(self.queue.put_nowait, event.to_message())


async def _forward(websocket: WebSocket, listener: QueueListener) -> None:
    while True:
        message = await listener.queue.get()
        await websocket.send_json(message)


async def _drain_client(websocket: WebSocket) -> None:
    # Clients have nothing to say; reading only detects the disconnect.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    notifier: Notifier = Depends(get_notifier),
) -> None:
    await websocket.accept()
    listener = QueueListener(asyncio.get_running_loop())
    notifier.subscribe(listener)
    logger.info("A client connected", extra={"listener_count": notifier.listener_count})

    tasks = [
        asyncio.create_task(_forward(websocket, listener)),
        asyncio.create_task(_drain_client(websocket)),
    ]
    try:
        done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        notifier.unsubscribe(listener)
        logger.info(
            "A client disconnected",
            extra={"listener_count": notifier.listener_count},
        )
