"""
Device Inventory — канонический инвентарь устройств проекта.

Главная операция — register_or_update (merge-or-create):
используется и при сверке снапшотов (source="sync"), и при ручной
регистрации (source="manual").

Порядок поиска существующей записи:
    1. context.existing_device_id
    2. (проект, MAC)
    3. только если MAC нет: (проект, IP), затем (проект, тип, имя)

Пример использования:
    service = DeviceInventoryService(devices, placement, activity, realtime)
    device = await service.register_or_update(
        project_id,
        RegisterPayload(type="Camera", mac_address="00:11:22:33:44:66"),
        RegisterContext(source="sync", metadata_patch={"gatewayMac": gw}),
    )
"""

import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..core.constants import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_MODEL_CHANGED,
    ACTION_UPDATE,
    ALLOWED_DEVICE_STATUSES,
    SOURCE_SYNC,
)
from ..core.domain.identity import clean_text, normalize_ip, normalize_mac, normalize_type
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.models import (
    Device,
    DeviceChanges,
    DeviceMetadata,
    DeviceStatus,
    DeviceType,
    RegisterContext,
    RegisterPayload,
    utc_now,
)
from ..store.base import DeviceStore
from .activity_log import ActivityLogService
from .placement import PlacementChecker
from .realtime import RealtimeBroadcaster

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Целое в base36 (для имён по умолчанию)."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def normalize_register_type(raw: Optional[str]) -> str:
    """
    Тип для ручной регистрации.

    Известные синонимы приводятся к Camera/NVR/Bridge/Switch,
    произвольный текст — к виду "Router" (первая буква заглавная).
    """
    text = clean_text(raw)
    if not text:
        raise ValidationError("type is required", field="type")
    canonical = normalize_type(text)
    if canonical:
        return canonical.value
    return text[:1].upper() + text[1:].lower()


def synthesize_name(device_type: str, name: Optional[str], model: Optional[str], ip: Optional[str]) -> str:
    """
    Имя по умолчанию: name -> type-model -> type-ip -> type-<base36 ms>.
    """
    if name:
        return name
    if model:
        return f"{device_type}-{model}"
    if ip:
        return f"{device_type}-{ip}"
    return f"{device_type}-{to_base36(int(time.time() * 1000))}"


def _created_sort_key(device: Device) -> datetime:
    return device.created_at or datetime.min.replace(tzinfo=timezone.utc)


class DeviceInventoryService:
    """
    Операции над каноническими устройствами.

    Все зависимости передаются явно: хранилище, проверка размещения,
    журнал и рассылка live-обновлений.
    """

    def __init__(
        self,
        devices: DeviceStore,
        placement: PlacementChecker,
        activity: ActivityLogService,
        realtime: RealtimeBroadcaster,
    ):
        self.devices = devices
        self.placement = placement
        self.activity = activity
        self.realtime = realtime

    # =========================================================================
    # Merge-or-create
    # =========================================================================

    async def register_or_update(
        self,
        project_id: str,
        payload: RegisterPayload,
        context: Optional[RegisterContext] = None,
    ) -> Device:
        """
        Находит существующее устройство и сливает в него данные, либо создаёт новое.

        Args:
            project_id: ID проекта
            payload: Тип, имя, модель, IP, MAC, статус
            context: Патч metadata, время наблюдения, источник, явный ID

        Returns:
            Device: Сохранённое устройство

        Raises:
            ValidationError: Некорректные данные или sync без MAC
            ConflictError: MAC занят другим устройством проекта
        """
        context = context or RegisterContext()
        device_type = normalize_register_type(payload.type)
        name = clean_text(payload.name)
        model = clean_text(payload.model)

        ip = None
        raw_ip = clean_text(payload.ip_address)
        if raw_ip:
            ip = normalize_ip(raw_ip)
            if ip is None:
                raise ValidationError("ip invalid", field="ipAddress", value=raw_ip)

        mac = None
        raw_mac = clean_text(payload.mac_address)
        if raw_mac:
            mac = normalize_mac(raw_mac)
            if mac is None:
                raise ValidationError("mac invalid", field="macAddress", value=raw_mac)

        if context.source == SOURCE_SYNC and not mac and not context.existing_device_id:
            raise ValidationError("mac address is required for synced devices", field="macAddress")

        status = clean_text(payload.status)
        if status is not None:
            status = status.lower()
            if status not in ALLOWED_DEVICE_STATUSES:
                raise ValidationError("status invalid", field="status", value=payload.status)

        base_name = synthesize_name(device_type, name, model, ip)
        seen_at = context.last_seen_at or utc_now()

        existing = await self._resolve_existing(project_id, device_type, base_name, ip, mac, context)
        if existing:
            return await self._merge_existing(existing, device_type, name, model, ip, mac, status, seen_at, context)

        device = Device(
            project_id=project_id,
            name=base_name,
            type=device_type,
            status=status or DeviceStatus.UNKNOWN.value,
            mac_address=mac,
            ip_address=ip,
            last_seen_at=seen_at,
            metadata=DeviceMetadata().merge(model=model, patch=context.metadata_patch),
        )
        saved = await self.devices.save(device)
        logger.debug(f"Создано устройство {saved.id} ({saved.type} {saved.name}) из {context.source}")
        self.realtime.emit_device_update(saved)
        await self.activity.record(
            project_id,
            ACTION_CREATE,
            {"deviceId": saved.id, "source": context.source},
        )
        return saved

    async def _resolve_existing(
        self,
        project_id: str,
        device_type: str,
        base_name: str,
        ip: Optional[str],
        mac: Optional[str],
        context: RegisterContext,
    ) -> Optional[Device]:
        if context.existing_device_id:
            device = await self.devices.get(project_id, context.existing_device_id)
            if device:
                return device
        if mac:
            return await self.devices.find_by_mac(project_id, mac)
        if ip:
            device = await self.devices.find_by_ip(project_id, ip)
            if device:
                return device
        return await self.devices.find_by_type_and_name(project_id, device_type, base_name)

    async def _merge_existing(
        self,
        existing: Device,
        device_type: str,
        name: Optional[str],
        model: Optional[str],
        ip: Optional[str],
        mac: Optional[str],
        status: Optional[str],
        seen_at: datetime,
        context: RegisterContext,
    ) -> Device:
        previous_model = existing.model if isinstance(existing.model, str) else None

        if mac:
            existing.mac_address = mac
        # Снова сообщённое устройство больше не скрыто
        existing.hidden_at = None
        existing.name = name or existing.name
        existing.type = device_type
        existing.ip_address = ip
        existing.status = status or existing.status
        existing.last_seen_at = seen_at
        existing.metadata = existing.metadata.merge(model=model, patch=context.metadata_patch)

        updated = await self.devices.save(existing)
        logger.debug(f"Обновлено устройство {updated.id} из {context.source}")
        self.realtime.emit_device_update(updated)
        await self.activity.record(
            updated.project_id,
            ACTION_UPDATE,
            {"deviceId": updated.id, "status": updated.status, "source": context.source},
        )
        if previous_model and model and model != previous_model:
            await self.activity.record(
                updated.project_id,
                ACTION_MODEL_CHANGED,
                {"deviceId": updated.id, "previousModel": previous_model, "currentModel": model},
            )
        return updated

    # =========================================================================
    # Пользовательские операции
    # =========================================================================

    async def create_switch(self, project_id: str, name: str) -> Device:
        """
        Регистрирует коммутатор вручную (без MAC).

        Raises:
            ValidationError: Пустое имя
            ConflictError: Коммутатор с таким именем (без учёта регистра) уже есть
        """
        trimmed = clean_text(name)
        if not trimmed:
            raise ValidationError("switch name is required", field="name")

        for device in await self.devices.list_by_project(project_id):
            if device.type == DeviceType.SWITCH.value and device.name.lower() == trimmed.lower():
                raise ConflictError(
                    f"Switch {trimmed!r} already exists in project",
                    details={"device_id": device.id},
                )

        saved = await self.devices.save(Device(
            project_id=project_id,
            name=trimmed,
            type=DeviceType.SWITCH.value,
            status=DeviceStatus.UNKNOWN.value,
        ))
        self.realtime.emit_device_update(saved)
        await self.activity.record(project_id, ACTION_CREATE, {"deviceId": saved.id, "type": saved.type})
        return saved

    async def _get_or_raise(self, project_id: str, device_id: str) -> Device:
        device = await self.devices.get(project_id, device_id)
        if device is None:
            raise NotFoundError(
                f"Device {device_id} not found in project {project_id}",
                entity="device",
                key=device_id,
            )
        return device

    async def update_device(self, project_id: str, device_id: str, changes: DeviceChanges) -> Device:
        """
        Пользовательская правка: имя, тип, IP, модель, статус, роль моста.

        Raises:
            NotFoundError: Устройство не найдено
            ValidationError: Некорректное значение поля
            ConflictError: Устройство размещено на схеме
        """
        device = await self._get_or_raise(project_id, device_id)
        await self.placement.assert_unplaced(project_id, device.id, device.mac_address)

        patch: Dict[str, Optional[str]] = {}
        previous_model = device.model if isinstance(device.model, str) else None
        model = None

        if changes.name is not None:
            name = clean_text(changes.name)
            if not name:
                raise ValidationError("name must not be empty", field="name")
            device.name = name
        if changes.type is not None:
            device_type = normalize_type(changes.type)
            if device_type is None:
                raise ValidationError("type invalid", field="type", value=changes.type)
            device.type = device_type.value
        if changes.ip_address is not None:
            ip = normalize_ip(changes.ip_address)
            if ip is None:
                raise ValidationError("ip invalid", field="ipAddress", value=changes.ip_address)
            device.ip_address = ip
        if changes.model is not None:
            model = clean_text(changes.model)
            patch["model"] = model
        if changes.status is not None:
            status = changes.status.strip().lower()
            if status not in ALLOWED_DEVICE_STATUSES:
                raise ValidationError("status invalid", field="status", value=changes.status)
            device.status = status
        if changes.bridge_role is not None:
            role = changes.bridge_role.strip().upper()
            if role not in ("AP", "ST"):
                raise ValidationError("bridgeRole must be AP or ST", field="bridgeRole", value=changes.bridge_role)
            patch["bridgeRole"] = role
        if device.type != DeviceType.BRIDGE.value:
            patch["bridgeRole"] = None

        device.metadata = device.metadata.merge(patch=patch)
        saved = await self.devices.save(device)
        self.realtime.emit_device_update(saved)
        await self.activity.record(project_id, ACTION_UPDATE, {"deviceId": saved.id, "status": saved.status})
        if previous_model and model and model != previous_model:
            await self.activity.record(
                project_id,
                ACTION_MODEL_CHANGED,
                {"deviceId": saved.id, "previousModel": previous_model, "currentModel": model},
            )
        return saved

    async def rename_device(self, project_id: str, device_id: str, alias: Optional[str]) -> Device:
        """
        Задаёт (или очищает пустой строкой) псевдоним устройства.

        Raises:
            NotFoundError: Устройство не найдено
            ValidationError: Псевдонимы для коммутаторов не поддерживаются
            ConflictError: Устройство размещено на схеме
        """
        device = await self._get_or_raise(project_id, device_id)
        if device.type == DeviceType.SWITCH.value:
            raise ValidationError("switches do not support aliases", field="alias")
        await self.placement.assert_unplaced(project_id, device.id, device.mac_address)

        device.alias = clean_text(alias)
        saved = await self.devices.save(device)
        self.realtime.emit_device_update(saved)
        await self.activity.record(project_id, ACTION_UPDATE, {"deviceId": saved.id, "alias": saved.alias})
        return saved

    async def remove_device(self, project_id: str, device_id: str, purge: bool = False) -> bool:
        """
        Убирает устройство из инвентаря.

        По умолчанию мягко: hidden_at = сейчас (устройство пропадает из
        sweep и из списка доступных). purge=True удаляет запись.

        Returns:
            bool: False если устройства нет (no-op)

        Raises:
            ConflictError: Устройство размещено на схеме
        """
        device = await self.devices.get(project_id, device_id)
        if device is None:
            return False
        await self.placement.assert_unplaced(project_id, device.id, device.mac_address)

        if purge:
            await self.devices.delete([device.id])
        else:
            device.hidden_at = utc_now()
            await self.devices.save(device)

        self.realtime.emit_device_removal(project_id, device.id, device.mac_address)
        await self.activity.record(project_id, ACTION_DELETE, {"deviceId": device.id, "purge": purge})
        return True

    # =========================================================================
    # Списки
    # =========================================================================

    async def list_devices(self, project_id: str, include_hidden: bool = False) -> List[Device]:
        devices = await self.devices.list_by_project(project_id)
        if include_hidden:
            return devices
        return [d for d in devices if not d.is_hidden]

    async def list_available_devices(self, project_id: str) -> List[Device]:
        """Нескрытые устройства, ещё не размещённые ни на одной схеме."""
        devices = await self.list_devices(project_id)
        if not devices:
            return devices
        placed = await self.placement.placed_keys(project_id)
        if not placed:
            return devices
        return [
            d for d in devices
            if d.id not in placed
            and not (d.mac_address and d.mac_address.lower() in placed)
        ]

    # =========================================================================
    # Обслуживание
    # =========================================================================

    async def _scope(self, project_id: Optional[str]) -> List[Device]:
        if project_id:
            return await self.devices.list_by_project(project_id)
        return await self.devices.list_all()

    async def deduplicate_switches(self, project_id: Optional[str] = None) -> List[str]:
        """
        Удаляет дубликаты коммутаторов.

        В каждой группе (проект, имя в lower-case) остаётся самый старый.

        Returns:
            List[str]: ID удалённых устройств
        """
        groups: Dict[Tuple[str, str], List[Device]] = defaultdict(list)
        for device in await self._scope(project_id):
            if device.type == DeviceType.SWITCH.value:
                groups[(device.project_id, device.name.strip().lower())].append(device)

        doomed: List[Device] = []
        for (pid, name), switches in groups.items():
            if len(switches) < 2:
                continue
            switches.sort(key=_created_sort_key)
            logger.info(f"Коммутатор {name!r} в проекте {pid}: дубликатов {len(switches) - 1}")
            doomed.extend(switches[1:])

        return await self._delete_many(doomed)

    async def purge_devices_without_mac(self, project_id: Optional[str] = None) -> List[str]:
        """
        Удаляет устройства (кроме коммутаторов) без MAC.

        Returns:
            List[str]: ID удалённых устройств
        """
        doomed = [
            d for d in await self._scope(project_id)
            if d.type != DeviceType.SWITCH.value and not d.mac_address
        ]
        return await self._delete_many(doomed)

    async def _delete_many(self, devices: List[Device]) -> List[str]:
        if not devices:
            return []
        removed = await self.devices.delete([d.id for d in devices])
        for device in devices:
            self.realtime.emit_device_removal(device.project_id, device.id, device.mac_address)
        logger.info(f"Удалено устройств: {removed}")
        return [d.id for d in devices]
