"""
Константы Gateway Inventory.

Таблицы синонимов типов устройств, допустимые статусы,
словари ролей беспроводных мостов и параметры раскладки дерева.
"""

from typing import Dict, FrozenSet

# Синонимы типов устройств от прошивок шлюзов (ключ: lower-case токен)
DEVICE_TYPE_SYNONYMS: Dict[str, str] = {
    "camera": "Camera",
    "cam": "Camera",
    "ipc": "Camera",
    "nvr": "NVR",
    "recorder": "NVR",
    "bridge": "Bridge",
    "wireless-bridge": "Bridge",
    "wifi-bridge": "Bridge",
    "switch": "Switch",
    "poe-switch": "Switch",
}

ALLOWED_DEVICE_STATUSES = ("online", "offline", "warning", "unknown")

# Роли беспроводного моста: AP (точка доступа) и ST (станция/клиент)
AP_TOKENS: FrozenSet[str] = frozenset({"ap", "access", "accesspoint", "master"})
ST_TOKENS: FrozenSet[str] = frozenset({"st", "sta", "station", "client", "subscriber", "slave"})

# Ключи metadata, из которых визуализация берёт подсказки роли моста
DISPLAY_ROLE_KEYS = (
    "bridgeRole",
    "role",
    "bridge_mode",
    "bridgeMode",
    "mode",
    "type",
    "category",
    "kind",
    "model",
)

# Источники изменений устройства
SOURCE_SYNC = "sync"
SOURCE_MANUAL = "manual"

# Действия журнала активности
ACTION_SYNC = "device.sync"
ACTION_CREATE = "device.create"
ACTION_UPDATE = "device.update"
ACTION_DELETE = "device.delete"
ACTION_MODEL_CHANGED = "device.model_changed"

# Причины отказа по устройству в ответе шлюзу
REASON_MAC_INVALID = "mac invalid"
REASON_TYPE_INVALID = "type invalid"
REASON_PROJECT_NOT_FOUND = "project not found"
REASON_TIMEOUT = "timeout"
REASON_UNKNOWN = "unknown error"

# Дерево топологии
TREE_ROOT_MARKER = "ofc"
TREE_HORIZONTAL_SPACING = 220
TREE_VERTICAL_SPACING = 150

# Снапшот
MAX_STATUSES_PER_DEVICE = 12
DEFAULT_SYNC_DEADLINE_SECONDS = 30.0
