"""
Хранилища на базе JSON файлов.

Каждое хранилище — один файл в data_dir:
    devices.json, projects.json, layouts.json, activity_log.json

Файл читается один раз при первом обращении, дальше состояние живёт
в памяти и целиком записывается после каждого изменения.
Чтение/запись выполняются в thread pool, чтобы не блокировать event loop.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, List, Optional

from ..core.exceptions import StoreError
from ..core.models import ActivityLogEntry, Device, LayoutVersion, Project
from .memory import (
    InMemoryActivityLogStore,
    InMemoryDeviceStore,
    InMemoryLayoutStore,
    InMemoryProjectStore,
)

logger = logging.getLogger(__name__)


class JsonFile:
    """
    JSON файл со списком записей.

    Запись атомарная: во временный файл, затем os.replace.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> List[Any]:
        """Загружает список из файла (пустой список если файла нет или он битый)."""
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Не удалось прочитать {self.path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Неожиданный формат {self.path}: ожидался список")
            return []
        return data

    def write(self, rows: List[Any]) -> None:
        """Сохраняет список в файл."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(rows, f, ensure_ascii=False, indent=2, default=str)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Failed to write {self.path}", details={"error": str(e)}) from e

    async def aread(self) -> List[Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.read)

    async def awrite(self, rows: List[Any]) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.write, rows)


def _parse_rows(rows: List[Any], factory: Callable[[dict], Any], path: Path) -> List[Any]:
    parsed = []
    for row in rows:
        try:
            parsed.append(factory(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Пропущена некорректная запись в {path}: {e}")
    return parsed


class JsonDeviceStore(InMemoryDeviceStore):
    """Устройства в data_dir/devices.json."""

    def __init__(self, data_dir: Path):
        super().__init__()
        self.file = JsonFile(Path(data_dir) / "devices.json")
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        rows = await self.file.aread()
        for device in _parse_rows(rows, Device.from_dict, self.file.path):
            if device.id:
                self._rows[device.id] = device
        self._loaded = True
        logger.debug(f"Загружено устройств: {len(self._rows)} из {self.file.path}")

    async def _persist(self) -> None:
        await self.file.awrite([d.to_dict() for d in self._rows.values()])


class JsonProjectStore(InMemoryProjectStore):
    """Проекты в data_dir/projects.json."""

    def __init__(self, data_dir: Path):
        super().__init__()
        self.file = JsonFile(Path(data_dir) / "projects.json")
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        rows = await self.file.aread()
        for project in _parse_rows(rows, Project.from_dict, self.file.path):
            self._rows[project.id] = project
        self._loaded = True

    async def _persist(self) -> None:
        await self.file.awrite([p.to_dict() for p in self._rows.values()])


class JsonLayoutStore(InMemoryLayoutStore):
    """Текущие версии схем в data_dir/layouts.json."""

    def __init__(self, data_dir: Path):
        super().__init__()
        self.file = JsonFile(Path(data_dir) / "layouts.json")
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        rows = await self.file.aread()
        for version in _parse_rows(rows, LayoutVersion.from_dict, self.file.path):
            self._rows[(version.project_id, version.layout_id)] = version
        self._loaded = True

    async def _persist(self) -> None:
        await self.file.awrite([v.to_dict() for v in self._rows.values()])


class JsonActivityLogStore(InMemoryActivityLogStore):
    """Журнал активности в data_dir/activity_log.json (не больше limit записей)."""

    def __init__(self, data_dir: Path, limit: int = 1000):
        super().__init__(limit=limit)
        self.file = JsonFile(Path(data_dir) / "activity_log.json")
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        rows = await self.file.aread()
        self._entries = _parse_rows(rows, ActivityLogEntry.from_dict, self.file.path)[: self.limit]
        self._loaded = True

    async def _persist(self) -> None:
        await self.file.awrite([e.to_dict() for e in self._entries])


def create_stores(backend: str, data_dir: Optional[Path] = None, activity_log_limit: int = 1000) -> dict:
    """
    Фабрика хранилищ по имени backend.

    Args:
        backend: memory | json
        data_dir: Папка с JSON файлами (для json)
        activity_log_limit: Максимум записей журнала

    Returns:
        dict: {"devices", "projects", "layouts", "activity"}
    """
    if backend == "memory":
        return {
            "devices": InMemoryDeviceStore(),
            "projects": InMemoryProjectStore(),
            "layouts": InMemoryLayoutStore(),
            "activity": InMemoryActivityLogStore(limit=activity_log_limit),
        }
    if backend == "json":
        data_dir = Path(data_dir or "data")
        return {
            "devices": JsonDeviceStore(data_dir),
            "projects": JsonProjectStore(data_dir),
            "layouts": JsonLayoutStore(data_dir),
            "activity": JsonActivityLogStore(data_dir, limit=activity_log_limit),
        }
    raise StoreError(f"Unknown storage backend: {backend}", details={"backend": backend})
