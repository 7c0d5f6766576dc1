"""
Realtime websocket — live-обновления устройств проекта.

WS /realtime/{project_id}
    ← {"event": "device.update", "data": {...}}
    ← {"event": "device.remove", "data": {"id": ..., "mac": ...}}

Отправка событий и ожидание отключения клиента идут параллельно:
подписка снимается сразу после disconnect, а не при следующем событии.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)
router = APIRouter()


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


async def _wait_disconnect(websocket: WebSocket) -> None:
    """Входящие сообщения клиента игнорируются, ждём только disconnect."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/realtime/{project_id}")
async def realtime(websocket: WebSocket, project_id: str):
    """Подписка на события проекта до отключения клиента."""
    broadcaster = websocket.app.state.container.realtime
    # Подписка до accept: события после подключения не теряются
    queue = broadcaster.subscribe(project_id)
    tasks = []
    try:
        await websocket.accept()
        tasks = [
            asyncio.create_task(_forward_events(websocket, queue)),
            asyncio.create_task(_wait_disconnect(websocket)),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

        for task in done:
            error = task.exception()
            if error is None or isinstance(error, WebSocketDisconnect):
                continue
            # Сбой отправки закрывает только это соединение
            logger.warning(f"Realtime соединение project={project_id} закрыто: {error!r}")
        logger.debug(f"Клиент отключился: project={project_id}")
    finally:
        for task in tasks:
            task.cancel()
        broadcaster.unsubscribe(project_id, queue)
