"""
Device Sync — сверка снапшотов шлюзов с инвентарём.

Шаги обработки снапшота:
    1. MAC шлюза обязателен и валиден, иначе ValidationError (весь запрос отклонён)
    2. Активный проект по коду; не найден — все записи в failed с "project not found",
       никаких побочных эффектов
    3. Записи по порядку, независимо друг от друга: нормализация, статусы,
       патч metadata, register_or_update(source="sync"); ошибка записи
       попадает в failed и не прерывает пакет
    4. Sweep: всё, что не было увидено, переходит в offline
    5. Одна запись журнала device.sync
    6. {processed, failed[]}

Снапшоты одного проекта обрабатываются по очереди (asyncio.Lock на проект),
разных проектов — независимо. Общий дедлайн ограничивает обработку:
записи, до которых не дошла очередь, получают причину "timeout".

Пример использования:
    service = DeviceSyncService(projects, devices, inventory, activity)
    result = await service.process_snapshot(SnapshotRequest.from_dict(body))
    print(result.to_dict())  # {"processed": 2, "failed": [{"mac": "xx", "reason": "mac invalid"}]}
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from ..core.constants import (
    ACTION_SYNC,
    DEFAULT_SYNC_DEADLINE_SECONDS,
    MAX_STATUSES_PER_DEVICE,
    REASON_PROJECT_NOT_FOUND,
    REASON_TIMEOUT,
    SOURCE_SYNC,
)
from ..core.context import RunContext, get_current_context, use_context
from ..core.domain.bridge_role import collect_bridge_role_candidates, resolve_bridge_role
from ..core.domain.identity import (
    check_mac,
    check_type,
    clean_text,
    extract_metrics,
    extract_statuses,
    normalize_ip,
    normalize_mac,
    normalize_timestamp,
)
from ..core.exceptions import ValidationError, failure_reason, format_error_for_log
from ..core.logging import OperationLog, get_logger
from ..core.models import (
    DeviceStatus,
    DeviceType,
    RegisterContext,
    RegisterPayload,
    SnapshotDevice,
    SnapshotRequest,
    SyncFailure,
    SyncResult,
    utc_now,
)
from ..store.base import DeviceStore, ProjectStore
from .activity_log import ActivityLogService
from .inventory import DeviceInventoryService

logger = get_logger(__name__)


class _Deadline:
    """Остаток бюджета времени на обработку снапшота."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._loop = asyncio.get_running_loop()
        self._expires_at = self._loop.time() + seconds

    def remaining(self) -> float:
        return self._expires_at - self._loop.time()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


class DeviceSyncService:
    """
    Сверка снапшотов и sweep отсутствующих устройств.

    Args:
        projects: Хранилище проектов
        devices: Хранилище устройств (для sweep)
        inventory: Merge-or-create операции
        activity: Журнал активности
        deadline_seconds: Дедлайн на один снапшот
        max_statuses: Максимум статусов на запись (лишние отбрасываются)
    """

    def __init__(
        self,
        projects: ProjectStore,
        devices: DeviceStore,
        inventory: DeviceInventoryService,
        activity: ActivityLogService,
        deadline_seconds: float = DEFAULT_SYNC_DEADLINE_SECONDS,
        max_statuses: int = MAX_STATUSES_PER_DEVICE,
    ):
        self.projects = projects
        self.devices = devices
        self.inventory = inventory
        self.activity = activity
        self.deadline_seconds = deadline_seconds
        self.max_statuses = max_statuses
        self._locks: Dict[str, asyncio.Lock] = {}

    def _project_lock(self, project_id: str) -> asyncio.Lock:
        lock = self._locks.get(project_id)
        if lock is None:
            lock = self._locks[project_id] = asyncio.Lock()
        return lock

    async def process_snapshot(self, request: SnapshotRequest) -> SyncResult:
        """
        Обрабатывает снапшот шлюза.

        Args:
            request: Снапшот

        Returns:
            SyncResult: {processed, failed[]}

        Raises:
            ValidationError: Некорректный MAC шлюза
        """
        gateway_mac = normalize_mac(request.gateway_mac)
        if not gateway_mac:
            raise ValidationError("gateway mac invalid", field="gatewayMac", value=request.gateway_mac)

        ctx = get_current_context() or RunContext.create(
            triggered_by="api",
            command="device-sync",
            gateway_mac=gateway_mac,
        )
        with use_context(ctx):
            return await self._process(request, gateway_mac)

    async def _process(self, request: SnapshotRequest, gateway_mac: str) -> SyncResult:
        gateway_ip = normalize_ip(request.gateway_ip)
        snapshot_time = normalize_timestamp(request.scanned_at)

        project = await self.projects.find_active_by_code(request.project_code)
        if project is None:
            logger.warning(
                f"Проект с кодом {request.project_code} не найден, снапшот отклонён",
                gateway=gateway_mac,
            )
            return SyncResult(
                processed=0,
                failed=[SyncFailure(mac=d.mac, reason=REASON_PROJECT_NOT_FOUND) for d in request.devices],
            )

        log = logger.bind(project=project.id, gateway=gateway_mac)
        op = OperationLog(operation="device-sync", project=project.id).start()

        async with self._project_lock(project.id):
            deadline = _Deadline(self.deadline_seconds)
            seen_at = snapshot_time or utc_now()
            result = SyncResult()
            seen_ids: Set[str] = set()
            seen_macs: Set[str] = set()

            base_patch: Dict[str, Any] = {"gatewayMac": gateway_mac}
            if gateway_ip:
                base_patch["gatewayIp"] = gateway_ip
            if snapshot_time:
                base_patch["scannedAt"] = snapshot_time.isoformat()

            timed_out = False
            for entry in request.devices:
                if timed_out or deadline.expired:
                    timed_out = True
                    result.failed.append(SyncFailure(mac=entry.mac, reason=REASON_TIMEOUT))
                    # Запись была в отчёте, sweep не должен считать её отсутствующей
                    mac = normalize_mac(entry.mac)
                    if mac:
                        seen_macs.add(mac)
                    continue

                try:
                    device = await asyncio.wait_for(
                        self._reconcile_entry(project.id, entry, base_patch, seen_at),
                        timeout=deadline.remaining(),
                    )
                except asyncio.TimeoutError:
                    timed_out = True
                    result.failed.append(SyncFailure(mac=entry.mac, reason=REASON_TIMEOUT))
                    mac = normalize_mac(entry.mac)
                    if mac:
                        seen_macs.add(mac)
                    continue
                except Exception as e:
                    log.debug(f"Запись {entry.mac!r} отклонена: {format_error_for_log(e)}")
                    result.failed.append(SyncFailure(mac=entry.mac, reason=failure_reason(e)))
                    continue

                result.processed += 1
                seen_ids.add(device.id)
                if device.mac_address:
                    seen_macs.add(device.mac_address.lower())

            if timed_out:
                log.warning(f"Дедлайн {self.deadline_seconds}s превышен при обработке снапшота")

            offline = 0
            if deadline.expired:
                log.warning("Sweep пропущен: бюджет времени исчерпан")
            else:
                try:
                    offline = await asyncio.wait_for(
                        self.sweep_absent(project.id, seen_ids, seen_macs, seen_at),
                        timeout=deadline.remaining(),
                    )
                except asyncio.TimeoutError:
                    log.warning("Sweep прерван по дедлайну")

        await self.activity.record(
            project.id,
            ACTION_SYNC,
            {"gatewayMac": gateway_mac, "processed": result.processed, "failed": len(result.failed)},
        )
        op.success(processed=result.processed, failed=len(result.failed), offline=offline).log(log)
        return result

    async def _reconcile_entry(
        self,
        project_id: str,
        entry: SnapshotDevice,
        base_patch: Dict[str, Any],
        seen_at: datetime,
    ):
        mac_result = check_mac(entry.mac)
        if not mac_result.ok:
            raise ValidationError(mac_result.error, field="mac", value=entry.mac)
        type_result = check_type(entry.type)
        if not type_result.ok:
            raise ValidationError(type_result.error, field="type", value=entry.type)
        device_type: DeviceType = type_result.value

        statuses = entry.statuses[: self.max_statuses] if isinstance(entry.statuses, list) else None
        primary_status, extra_statuses = extract_statuses(statuses)

        patch: Dict[str, Any] = {"extraStatuses": extra_statuses, **base_patch}
        metrics = extract_metrics(entry.latency_ms, entry.packet_loss, entry.metrics)
        if metrics:
            patch["metrics"] = metrics
        if device_type == DeviceType.BRIDGE:
            role = resolve_bridge_role(collect_bridge_role_candidates(
                bridge_role=entry.bridge_role,
                mode=entry.mode,
                role=entry.role,
                model=entry.model,
                name=entry.name,
                statuses=statuses,
            ))
            if role:
                patch["bridgeRole"] = role.value

        payload = RegisterPayload(
            type=device_type.value,
            name=clean_text(entry.name),
            model=clean_text(entry.model),
            ip_address=normalize_ip(entry.ip),
            mac_address=mac_result.value,
            status=primary_status.value,
        )
        return await self.inventory.register_or_update(
            project_id,
            payload,
            RegisterContext(metadata_patch=patch, last_seen_at=seen_at, source=SOURCE_SYNC),
        )

    async def sweep_absent(
        self,
        project_id: str,
        seen_ids: Iterable[str],
        seen_macs: Iterable[str],
        seen_at: datetime,
    ) -> int:
        """
        Переводит в offline устройства проекта, которых не было в снапшоте.

        Пропускаются: увиденные (по id или MAC в lower-case), скрытые,
        уже offline. Ошибка по одному устройству логируется и не
        прерывает sweep.

        Returns:
            int: Сколько устройств переведено в offline
        """
        seen_ids = set(seen_ids)
        seen_macs = {m.lower() for m in seen_macs}
        transitioned = 0

        for device in await self.devices.list_by_project(project_id):
            mac = device.mac_address.lower() if device.mac_address else None
            if device.id in seen_ids or (mac and mac in seen_macs):
                continue
            if device.is_hidden:
                continue
            if device.status == DeviceStatus.OFFLINE.value:
                continue

            payload = RegisterPayload(
                type=device.type,
                name=device.name,
                ip_address=device.ip_address,
                mac_address=device.mac_address,
                status=DeviceStatus.OFFLINE.value,
            )
            try:
                await self.inventory.register_or_update(
                    project_id,
                    payload,
                    RegisterContext(
                        metadata_patch={"extraStatuses": []},
                        last_seen_at=seen_at,
                        source=SOURCE_SYNC,
                        existing_device_id=device.id,
                    ),
                )
                transitioned += 1
            except Exception as e:
                logger.warning(
                    f"Не удалось перевести устройство {device.id} в offline: {format_error_for_log(e)}",
                    project=project_id,
                    device=device.id,
                )

        if transitioned:
            logger.info(f"Переведено в offline: {transitioned}", project=project_id)
        return transitioned

    async def process_many(self, requests: List[SnapshotRequest]) -> List[Optional[SyncResult]]:
        """
        Обрабатывает несколько снапшотов конкурентно.

        Снапшоты разных проектов идут параллельно, одного проекта — по очереди.
        Отклонённый снапшот (некорректный MAC шлюза) даёт None.
        """
        async def _one(request: SnapshotRequest) -> Optional[SyncResult]:
            try:
                return await self.process_snapshot(request)
            except ValidationError as e:
                logger.warning(f"Снапшот отклонён: {e.message}", gateway=request.gateway_mac)
                return None

        return list(await asyncio.gather(*(_one(r) for r in requests)))
