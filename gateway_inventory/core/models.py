"""
Data Models для Gateway Inventory.

Типизированные dataclasses вместо Dict[str, Any]:
- Device: каноническая запись инвентаря
- DeviceMetadata: типизированный metadata-мешок с passthrough для неизвестных ключей
- SnapshotRequest / SnapshotDevice: входной снапшот шлюза
- SyncResult / SyncFailure: результат сверки
- CanvasElement / CanvasConnection / LayoutVersion: данные схемы для дерева топологии

Использование:
    from gateway_inventory.core.models import Device, SnapshotRequest

    request = SnapshotRequest.from_dict(payload)   # ключи в camelCase как на проводе
    device = Device.from_dict(row)                  # из хранилища
    row = device.to_dict()
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    """Текущее время в UTC (aware)."""
    return datetime.now(timezone.utc)


def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _dt_from_str(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DeviceType(str, Enum):
    """Канонический тип устройства."""
    CAMERA = "Camera"
    NVR = "NVR"
    BRIDGE = "Bridge"
    SWITCH = "Switch"


class DeviceStatus(str, Enum):
    """Статус устройства."""
    ONLINE = "online"
    OFFLINE = "offline"
    WARNING = "warning"
    UNKNOWN = "unknown"


class ProjectStatus(str, Enum):
    """Статус проекта."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


@dataclass
class DeviceMetadata:
    """
    Metadata устройства.

    Известные поля типизированы, неизвестные ключи сохраняются
    в extra и переживают слияние без потерь.

    Attributes:
        model: Модель устройства
        gateway_mac: MAC шлюза, сообщившего об устройстве
        gateway_ip: IP шлюза
        scanned_at: Время сканирования (ISO строка)
        metrics: Числовые метрики связи (latencyMs, packetLoss, ...)
        bridge_role: Роль беспроводного моста (AP/ST)
        extra_statuses: Дополнительные статусы шлюза (lower-case)
        extra: Прочие ключи
    """
    model: Optional[str] = None
    gateway_mac: Optional[str] = None
    gateway_ip: Optional[str] = None
    scanned_at: Optional[str] = None
    metrics: Optional[Dict[str, float]] = None
    bridge_role: Optional[str] = None
    extra_statuses: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    # Ключ на проводе -> атрибут
    KNOWN_KEYS = {
        "model": "model",
        "gatewayMac": "gateway_mac",
        "gatewayIp": "gateway_ip",
        "scannedAt": "scanned_at",
        "metrics": "metrics",
        "bridgeRole": "bridge_role",
        "extraStatuses": "extra_statuses",
    }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DeviceMetadata":
        """Создаёт DeviceMetadata из словаря (camelCase ключи)."""
        if not data:
            return cls()
        known = {}
        extra = {}
        for key, value in data.items():
            attr = cls.KNOWN_KEYS.get(key)
            if attr:
                known[attr] = copy.deepcopy(value)
            else:
                extra[key] = copy.deepcopy(value)
        return cls(extra=extra, **known)

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь (без пустых полей)."""
        result: Dict[str, Any] = {}
        for key, attr in self.KNOWN_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = copy.deepcopy(value)
        result.update(copy.deepcopy(self.extra))
        return result

    def get(self, key: str, default: Any = None) -> Any:
        """Значение по ключу на проводе."""
        return self.to_dict().get(key, default)

    def merge(
        self,
        model: Optional[str] = None,
        patch: Optional[Dict[str, Any]] = None,
    ) -> "DeviceMetadata":
        """
        Поверхностное слияние.

        Модель перезаписывается только если передана; ключи patch
        со значением None удаляются, остальные перезаписываются.

        Args:
            model: Новая модель
            patch: Патч metadata

        Returns:
            DeviceMetadata: Новый объект
        """
        data = self.to_dict()
        if model:
            data["model"] = model
        for key, value in (patch or {}).items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        return DeviceMetadata.from_dict(data)

    def is_empty(self) -> bool:
        return not self.to_dict()


@dataclass
class Device:
    """
    Каноническая запись устройства проекта.

    Attributes:
        id: Стабильный идентификатор (назначается при первом сохранении)
        project_id: Проект-владелец
        name: Отображаемое имя
        type: Camera | NVR | Bridge | Switch (или произвольная строка при ручной регистрации)
        status: online | offline | warning | unknown
        mac_address: aa:bb:cc:dd:ee:ff, уникален в проекте
        ip_address: IPv4 в dotted-quad
        alias: Пользовательский псевдоним
        metadata: DeviceMetadata
        last_seen_at: Время последнего снапшота с этим устройством
        hidden_at: Если задан — устройство исключено из sweep и из списка доступных
        created_at: Время создания
        updated_at: Время последнего изменения
    """
    project_id: str
    name: str
    type: str
    status: str = DeviceStatus.UNKNOWN.value
    id: Optional[str] = None
    mac_address: Optional[str] = None
    ip_address: Optional[str] = None
    alias: Optional[str] = None
    metadata: DeviceMetadata = field(default_factory=DeviceMetadata)
    last_seen_at: Optional[datetime] = None
    hidden_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def model(self) -> Optional[str]:
        return self.metadata.model

    @property
    def bridge_role(self) -> Optional[str]:
        role = self.metadata.bridge_role
        if isinstance(role, str) and role.upper() in ("AP", "ST"):
            return role.upper()
        return None

    @property
    def is_hidden(self) -> bool:
        return self.hidden_at is not None

    def copy(self) -> "Device":
        """Глубокая копия (хранилища не отдают свои объекты наружу)."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация для хранилища/экспорта."""
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "mac_address": self.mac_address,
            "ip_address": self.ip_address,
            "alias": self.alias,
            "metadata": self.metadata.to_dict() or None,
            "last_seen_at": _dt_to_str(self.last_seen_at),
            "hidden_at": _dt_to_str(self.hidden_at),
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        """Создаёт Device из словаря хранилища."""
        return cls(
            id=data.get("id"),
            project_id=data["project_id"],
            name=data.get("name") or "",
            type=data.get("type") or "",
            status=data.get("status") or DeviceStatus.UNKNOWN.value,
            mac_address=data.get("mac_address"),
            ip_address=data.get("ip_address"),
            alias=data.get("alias"),
            metadata=DeviceMetadata.from_dict(data.get("metadata")),
            last_seen_at=_dt_from_str(data.get("last_seen_at")),
            hidden_at=_dt_from_str(data.get("hidden_at")),
            created_at=_dt_from_str(data.get("created_at")),
            updated_at=_dt_from_str(data.get("updated_at")),
        )

    def to_view(self) -> Dict[str, Any]:
        """Представление для API и live-обновлений."""
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "type": self.type,
            "ip": self.ip_address,
            "mac": self.mac_address,
            "status": self.status,
            "model": self.model if isinstance(self.model, str) else None,
            "bridgeRole": self.bridge_role,
            "lastSeenAt": _dt_to_str(self.last_seen_at),
        }


@dataclass
class Project:
    """Проект (площадка). Шлюзы адресуют проект коротким числовым кодом 0-255."""
    id: str
    code: int
    name: str = ""
    status: str = ProjectStatus.ACTIVE.value

    @property
    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE.value

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "code": self.code, "name": self.name, "status": self.status}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            code=int(data["code"]),
            name=data.get("name") or "",
            status=data.get("status") or ProjectStatus.ACTIVE.value,
        )


@dataclass
class RegisterPayload:
    """Данные для merge-or-create операции."""
    type: str
    name: Optional[str] = None
    model: Optional[str] = None
    ip_address: Optional[str] = None
    mac_address: Optional[str] = None
    status: Optional[str] = None


@dataclass
class RegisterContext:
    """
    Контекст merge-or-create.

    Attributes:
        metadata_patch: Патч metadata (поверхностное слияние)
        last_seen_at: Время наблюдения (по умолчанию — сейчас)
        source: sync | manual
        existing_device_id: Явная привязка к существующей записи
    """
    metadata_patch: Optional[Dict[str, Any]] = None
    last_seen_at: Optional[datetime] = None
    source: str = "manual"
    existing_device_id: Optional[str] = None


@dataclass
class DeviceChanges:
    """Пользовательская правка устройства (None = поле не меняется)."""
    name: Optional[str] = None
    type: Optional[str] = None
    ip_address: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None
    bridge_role: Optional[str] = None


@dataclass
class SnapshotDevice:
    """Запись устройства в снапшоте шлюза (как пришла, без нормализации)."""
    mac: str = ""
    type: str = ""
    name: Optional[str] = None
    model: Optional[str] = None
    ip: Optional[str] = None
    statuses: Optional[List[str]] = None
    latency_ms: Optional[float] = None
    packet_loss: Optional[float] = None
    metrics: Optional[Dict[str, Any]] = None
    bridge_role: Optional[str] = None
    mode: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotDevice":
        """Создаёт SnapshotDevice из словаря провода (camelCase)."""
        return cls(
            mac=data.get("mac") or "",
            type=data.get("type") or "",
            name=data.get("name"),
            model=data.get("model"),
            ip=data.get("ip"),
            statuses=data.get("statuses"),
            latency_ms=data.get("latencyMs"),
            packet_loss=data.get("packetLoss"),
            metrics=data.get("metrics"),
            bridge_role=data.get("bridgeRole"),
            mode=data.get("mode"),
            role=data.get("role"),
        )


@dataclass
class SnapshotRequest:
    """Снапшот шлюза."""
    project_code: int
    gateway_mac: str
    gateway_ip: Optional[str] = None
    scanned_at: Optional[str] = None
    devices: List[SnapshotDevice] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotRequest":
        """Создаёт SnapshotRequest из тела POST /device-sync."""
        return cls(
            project_code=int(data["projectCode"]),
            gateway_mac=data.get("gatewayMac") or "",
            gateway_ip=data.get("gatewayIp"),
            scanned_at=data.get("scannedAt"),
            devices=[SnapshotDevice.from_dict(d) for d in data.get("devices") or []],
        )


@dataclass
class SyncFailure:
    """Отказ по одной записи снапшота."""
    reason: str
    mac: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.mac is not None:
            result["mac"] = self.mac
        result["reason"] = self.reason
        return result


@dataclass
class SyncResult:
    """Результат сверки снапшота: {processed, failed[]}."""
    processed: int = 0
    failed: List[SyncFailure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "failed": [f.to_dict() for f in self.failed],
        }


@dataclass
class ActivityLogEntry:
    """Запись журнала активности."""
    project_id: str
    action: str
    details: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "user_id": self.user_id,
            "action": self.action,
            "details": self.details,
            "created_at": _dt_to_str(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityLogEntry":
        return cls(
            id=data.get("id"),
            project_id=data["project_id"],
            user_id=data.get("user_id"),
            action=data["action"],
            details=data.get("details") or {},
            created_at=_dt_from_str(data.get("created_at")),
        )


# =============================================================================
# Схема (layout): потребляется деревом топологии и проверкой размещения
# =============================================================================

@dataclass
class CanvasElement:
    """
    Размещённое на схеме устройство.

    Attributes:
        id: ID элемента схемы
        name: Имя
        type: Тип устройства (свободная строка редактора)
        device_id: ID канонического устройства
        device_mac: MAC канонического устройства
        metadata: Metadata элемента (model, sourceDeviceId, sourceDeviceMac, ...)
    """
    id: str
    name: str = ""
    type: str = ""
    device_id: Optional[str] = None
    device_mac: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanvasElement":
        metadata = data.get("metadata")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            type=data.get("type") or "",
            device_id=data.get("deviceId") or data.get("device_id"),
            device_mac=data.get("deviceMac") or data.get("device_mac"),
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "deviceId": self.device_id,
            "deviceMac": self.device_mac,
            "metadata": self.metadata,
        }


@dataclass
class CanvasConnection:
    """
    Связь между устройствами на схеме (создаётся редактором).

    Attributes:
        id: ID связи
        kind: wired | wireless
        from_device_id: Ключ первого конца (ID устройства, MAC или ID элемента)
        to_device_id: Ключ второго конца
        bandwidth: {upstreamMbps, downstreamMbps}
        status: online | offline | warning
    """
    id: str
    kind: str = "wired"
    from_device_id: Optional[str] = None
    to_device_id: Optional[str] = None
    bandwidth: Optional[Dict[str, float]] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanvasConnection":
        return cls(
            id=str(data.get("id") or ""),
            kind=data.get("kind") or "wired",
            from_device_id=data.get("fromDeviceId") or data.get("from_device_id"),
            to_device_id=data.get("toDeviceId") or data.get("to_device_id"),
            bandwidth=data.get("bandwidth"),
            status=data.get("status"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "fromDeviceId": self.from_device_id,
            "toDeviceId": self.to_device_id,
            "bandwidth": self.bandwidth,
            "status": self.status,
        }


@dataclass
class LayoutVersion:
    """Текущая версия схемы (элементы + связи)."""
    id: str
    layout_id: str
    project_id: str
    elements: List[CanvasElement] = field(default_factory=list)
    connections: List[CanvasConnection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "layout_id": self.layout_id,
            "project_id": self.project_id,
            "elements": [e.to_dict() for e in self.elements],
            "connections": [c.to_dict() for c in self.connections],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutVersion":
        return cls(
            id=str(data.get("id") or ""),
            layout_id=data.get("layout_id") or data.get("layoutId") or "",
            project_id=data.get("project_id") or data.get("projectId") or "",
            elements=[
                CanvasElement.from_dict(e) for e in data.get("elements") or []
                if isinstance(e, dict) and e.get("id")
            ],
            connections=[
                CanvasConnection.from_dict(c) for c in data.get("connections") or []
                if isinstance(c, dict)
            ],
        )
