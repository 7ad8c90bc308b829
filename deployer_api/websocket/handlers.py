"""WebSocket endpoint handlers."""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from ..config import get_settings
from ..models.events import DeployEvent
from ..services.deploy.orchestrator import DeployOrchestrator
from .manager import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)


async def events_websocket(
    websocket: WebSocket,
    orchestrator: DeployOrchestrator,
    manager: Optional[ConnectionManager] = None,
) -> None:
    """
    Stream deploy events to one client.

    The first message is the full state snapshot; every later message is a
    broadcast event flattened to JSON.

    Message format (JSON):
    {"type": "state", "data": {"config": {...}, "components": {...}, ...}}
    {"type": "job-output", "job_id": "uuid", "component_id": "redis",
     "data": "TASK [Create deployment] ...", "timestamp": "..."}
    {"type": "heartbeat"}
    """
    if manager is None:
        manager = get_connection_manager()
    settings = get_settings()

    await manager.connect(websocket)

    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(
        maxsize=settings.event_queue_size
    )

    def enqueue(message: Dict[str, Any]) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Event queue full, dropping {message.get('type')} event")

    def on_event(event: DeployEvent) -> None:
        loop.call_soon_threadsafe(enqueue, event.to_message())

    orchestrator.subscribe(on_event)

    try:
        await websocket.send_json(
            {"type": "state", "data": orchestrator.get_state().model_dump(mode="json")}
        )

        receiver = asyncio.ensure_future(_receive_until_disconnect(websocket))
        sender = asyncio.ensure_future(
            _forward_events(websocket, queue, settings.websocket_heartbeat_seconds)
        )
        done, pending = await asyncio.wait(
            {receiver, sender}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        for task in done:
            task.result()

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")

    finally:
        orchestrator.unsubscribe(on_event)
        await manager.disconnect(websocket)


async def _receive_until_disconnect(websocket: WebSocket) -> None:
    """Drain client messages; returns once the client goes away."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


async def _forward_events(
    websocket: WebSocket,
    queue: "asyncio.Queue[Dict[str, Any]]",
    heartbeat_seconds: float,
) -> None:
    while True:
        try:
            message = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
        except asyncio.TimeoutError:
            # Send heartbeat
            message = {"type": "heartbeat"}
        await websocket.send_json(message)
