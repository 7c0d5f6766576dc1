"""
Хранилища в памяти.

Используются в тестах и при storage.backend = memory.
JSON-реализации (json_store.py) наследуются от них и добавляют
загрузку/сохранение файла вокруг тех же операций.
"""

import asyncio
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.exceptions import ConflictError
from ..core.models import ActivityLogEntry, Device, LayoutVersion, Project, utc_now
from .base import ActivityLogStore, DeviceStore, LayoutStore, ProjectStore


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryDeviceStore(DeviceStore):
    """Устройства в словаре {id: Device}, порядок вставки = порядок создания."""

    def __init__(self, devices: Optional[Iterable[Device]] = None):
        self._rows: Dict[str, Device] = {}
        self._lock = asyncio.Lock()
        for device in devices or []:
            if not device.id:
                device.id = _new_id()
            self._rows[device.id] = device.copy()

    async def _ensure_loaded(self) -> None:
        """Хук для файловых реализаций."""

    async def _persist(self) -> None:
        """Хук для файловых реализаций."""

    def _scan(self, project_id: str) -> List[Device]:
        return [d for d in self._rows.values() if d.project_id == project_id]

    async def get(self, project_id: str, device_id: str) -> Optional[Device]:
        await self._ensure_loaded()
        device = self._rows.get(device_id)
        if device is None or device.project_id != project_id:
            return None
        return device.copy()

    async def find_by_mac(self, project_id: str, mac: str) -> Optional[Device]:
        await self._ensure_loaded()
        if not mac:
            return None
        needle = mac.lower()
        for device in self._scan(project_id):
            if device.mac_address and device.mac_address.lower() == needle:
                return device.copy()
        return None

    async def find_by_ip(self, project_id: str, ip: str) -> Optional[Device]:
        await self._ensure_loaded()
        if not ip:
            return None
        for device in self._scan(project_id):
            if device.ip_address == ip:
                return device.copy()
        return None

    async def find_by_type_and_name(self, project_id: str, device_type: str, name: str) -> Optional[Device]:
        await self._ensure_loaded()
        for device in self._scan(project_id):
            if device.type == device_type and device.name == name:
                return device.copy()
        return None

    async def list_by_project(self, project_id: str) -> List[Device]:
        await self._ensure_loaded()
        return [d.copy() for d in self._scan(project_id)]

    async def list_all(self) -> List[Device]:
        await self._ensure_loaded()
        return [d.copy() for d in self._rows.values()]

    async def save(self, device: Device) -> Device:
        await self._ensure_loaded()
        async with self._lock:
            if device.mac_address:
                needle = device.mac_address.lower()
                for other in self._scan(device.project_id):
                    if other.id != device.id and other.mac_address and other.mac_address.lower() == needle:
                        raise ConflictError(
                            f"MAC {device.mac_address} is already used by device {other.id}",
                            details={"mac": device.mac_address, "device_id": other.id},
                        )

            stored = device.copy()
            now = utc_now()
            if not stored.id:
                stored.id = _new_id()
            if stored.created_at is None:
                existing = self._rows.get(stored.id)
                stored.created_at = existing.created_at if existing and existing.created_at else now
            stored.updated_at = now
            self._rows[stored.id] = stored
            await self._persist()
            return stored.copy()

    async def delete(self, device_ids: Iterable[str]) -> int:
        await self._ensure_loaded()
        async with self._lock:
            removed = 0
            for device_id in list(device_ids):
                if self._rows.pop(device_id, None) is not None:
                    removed += 1
            if removed:
                await self._persist()
            return removed


class InMemoryProjectStore(ProjectStore):
    """Проекты в словаре {id: Project}."""

    def __init__(self, projects: Optional[Iterable[Project]] = None):
        self._rows: Dict[str, Project] = {p.id: p for p in projects or []}
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        """Хук для файловых реализаций."""

    async def _persist(self) -> None:
        """Хук для файловых реализаций."""

    async def get(self, project_id: str) -> Optional[Project]:
        await self._ensure_loaded()
        return self._rows.get(project_id)

    async def find_active_by_code(self, code: int) -> Optional[Project]:
        await self._ensure_loaded()
        for project in self._rows.values():
            if project.code == code and project.is_active:
                return project
        return None

    async def list_all(self) -> List[Project]:
        await self._ensure_loaded()
        return list(self._rows.values())

    async def save(self, project: Project) -> Project:
        await self._ensure_loaded()
        async with self._lock:
            self._rows[project.id] = project
            await self._persist()
            return project


class InMemoryLayoutStore(LayoutStore):
    """Текущие версии схем в словаре {(project_id, layout_id): LayoutVersion}."""

    def __init__(self, versions: Optional[Iterable[LayoutVersion]] = None):
        self._rows: Dict[Tuple[str, str], LayoutVersion] = {}
        self._lock = asyncio.Lock()
        for version in versions or []:
            self._rows[(version.project_id, version.layout_id)] = version

    async def _ensure_loaded(self) -> None:
        """Хук для файловых реализаций."""

    async def _persist(self) -> None:
        """Хук для файловых реализаций."""

    async def list_current_versions(self, project_id: str) -> List[LayoutVersion]:
        await self._ensure_loaded()
        return [v for (pid, _), v in self._rows.items() if pid == project_id]

    async def get_current_version(self, project_id: str, layout_id: str) -> Optional[LayoutVersion]:
        await self._ensure_loaded()
        return self._rows.get((project_id, layout_id))

    async def save_version(self, version: LayoutVersion) -> LayoutVersion:
        await self._ensure_loaded()
        async with self._lock:
            self._rows[(version.project_id, version.layout_id)] = version
            await self._persist()
            return version


class InMemoryActivityLogStore(ActivityLogStore):
    """Журнал активности в списке, не больше limit записей (старые отбрасываются)."""

    def __init__(self, limit: int = 1000):
        self.limit = limit
        self._entries: List[ActivityLogEntry] = []
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        """Хук для файловых реализаций."""

    async def _persist(self) -> None:
        """Хук для файловых реализаций."""

    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        await self._ensure_loaded()
        async with self._lock:
            entry.id = entry.id or _new_id()
            entry.created_at = entry.created_at or utc_now()
            # Новые записи в начало
            self._entries.insert(0, entry)
            del self._entries[self.limit:]
            await self._persist()
            return entry

    async def list(self, project_id: Optional[str] = None, limit: int = 100) -> List[ActivityLogEntry]:
        await self._ensure_loaded()
        entries = self._entries
        if project_id:
            entries = [e for e in entries if e.project_id == project_id]
        return entries[:limit]
