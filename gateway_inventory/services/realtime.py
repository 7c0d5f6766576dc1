"""
Live-обновления для клиентов.

Каждый подписчик (websocket /realtime/{project_id}) получает свою
очередь событий проекта. Доставка best effort: переполненная очередь
медленного клиента теряет событие, отправитель никогда не блокируется.

События:
    {"event": "device.update", "data": {id, name, type, ip, status, model?, bridgeRole?}}
    {"event": "device.remove", "data": {id, mac?}}
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from ..core.models import Device

logger = logging.getLogger(__name__)

EVENT_DEVICE_UPDATE = "device.update"
EVENT_DEVICE_REMOVE = "device.remove"


class RealtimeBroadcaster:
    """Рассылка событий устройств по проектам."""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscribe(self, project_id: str) -> asyncio.Queue:
        """Регистрирует подписчика проекта и возвращает его очередь."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.setdefault(project_id, set()).add(queue)
        logger.debug(f"Подписчик добавлен: project={project_id}")
        return queue

    def unsubscribe(self, project_id: str, queue: asyncio.Queue) -> None:
        subscribers = self._subscribers.get(project_id)
        if not subscribers:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[project_id]

    def subscriber_count(self, project_id: str) -> int:
        return len(self._subscribers.get(project_id, ()))

    def _publish(self, project_id: str, event: str, data: Dict[str, Any]) -> int:
        message = {"event": event, "data": data}
        delivered = 0
        for queue in list(self._subscribers.get(project_id, ())):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Очередь подписчика переполнена, событие {event} потеряно (project={project_id})")
        return delivered

    def emit_device_update(self, device: Device) -> int:
        """Событие обновления устройства. Возвращает число получателей."""
        data = {
            "id": device.id,
            "name": device.name,
            "type": device.type,
            "ip": device.ip_address,
            "status": device.status,
        }
        if isinstance(device.model, str):
            data["model"] = device.model
        if device.bridge_role:
            data["bridgeRole"] = device.bridge_role
        return self._publish(device.project_id, EVENT_DEVICE_UPDATE, data)

    def emit_device_removal(self, project_id: str, device_id: str, mac: Optional[str] = None) -> int:
        """Событие удаления (скрытия) устройства."""
        data: Dict[str, Any] = {"id": device_id}
        if mac:
            data["mac"] = mac
        return self._publish(project_id, EVENT_DEVICE_REMOVE, data)
