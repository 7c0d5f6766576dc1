"""
Сервисы Gateway Inventory.

- inventory: merge-or-create и пользовательские операции с устройствами
- sync: сверка снапшотов шлюзов и sweep отсутствующих устройств
- placement: проверка размещения устройств на схемах
- activity_log: журнал активности
- realtime: live-обновления по проектам
"""

from .activity_log import ActivityLogService
from .inventory import DeviceInventoryService
from .placement import PlacementChecker
from .realtime import RealtimeBroadcaster
from .sync import DeviceSyncService

__all__ = [
    "ActivityLogService",
    "DeviceInventoryService",
    "PlacementChecker",
    "RealtimeBroadcaster",
    "DeviceSyncService",
]
