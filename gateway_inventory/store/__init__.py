"""
Хранилища Gateway Inventory.

- base: абстрактные репозитории (DeviceStore, ProjectStore, LayoutStore, ActivityLogStore)
- memory: реализации в памяти
- json_store: реализации на JSON файлах + фабрика create_stores
"""

from .base import ActivityLogStore, DeviceStore, LayoutStore, ProjectStore
from .memory import (
    InMemoryActivityLogStore,
    InMemoryDeviceStore,
    InMemoryLayoutStore,
    InMemoryProjectStore,
)
from .json_store import (
    JsonActivityLogStore,
    JsonDeviceStore,
    JsonFile,
    JsonLayoutStore,
    JsonProjectStore,
    create_stores,
)

__all__ = [
    "ActivityLogStore",
    "DeviceStore",
    "LayoutStore",
    "ProjectStore",
    "InMemoryActivityLogStore",
    "InMemoryDeviceStore",
    "InMemoryLayoutStore",
    "InMemoryProjectStore",
    "JsonActivityLogStore",
    "JsonDeviceStore",
    "JsonFile",
    "JsonLayoutStore",
    "JsonProjectStore",
    "create_stores",
]
