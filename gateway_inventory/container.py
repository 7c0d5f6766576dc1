"""
Сборка зависимостей Gateway Inventory.

Хранилища и сервисы создаются из конфигурации один раз и передаются
явно: в FastAPI через app.state, в CLI напрямую.

Пример:
    container = Container.from_config(load_config())
    await container.seed_projects()
    result = await container.sync.process_snapshot(request)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import Config
from .core.domain.topology import TreeLayoutBuilder
from .core.models import Project
from .services.activity_log import ActivityLogService
from .services.inventory import DeviceInventoryService
from .services.placement import PlacementChecker
from .services.realtime import RealtimeBroadcaster
from .services.sync import DeviceSyncService
from .store.base import ActivityLogStore, DeviceStore, LayoutStore, ProjectStore
from .store.json_store import create_stores

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Все зависимости приложения."""
    config: Config
    devices: DeviceStore
    projects: ProjectStore
    layouts: LayoutStore
    activity_store: ActivityLogStore
    activity: ActivityLogService
    realtime: RealtimeBroadcaster
    placement: PlacementChecker
    inventory: DeviceInventoryService
    sync: DeviceSyncService
    tree_builder: TreeLayoutBuilder

    @classmethod
    def from_config(cls, config: Optional[Config] = None, backend: Optional[str] = None) -> "Container":
        """
        Создаёт хранилища и сервисы по конфигурации.

        Args:
            config: Конфигурация (по умолчанию — значения по умолчанию)
            backend: Переопределение storage.backend (memory | json)
        """
        config = config or Config()
        stores = create_stores(
            backend or config.storage.backend,
            data_dir=Path(config.storage.data_dir),
            activity_log_limit=config.storage.activity_log_limit,
        )
        activity = ActivityLogService(stores["activity"])
        realtime = RealtimeBroadcaster()
        placement = PlacementChecker(stores["layouts"])
        inventory = DeviceInventoryService(stores["devices"], placement, activity, realtime)
        sync = DeviceSyncService(
            stores["projects"],
            stores["devices"],
            inventory,
            activity,
            deadline_seconds=config.sync.deadline_seconds,
            max_statuses=config.sync.max_statuses,
        )
        tree_builder = TreeLayoutBuilder(
            horizontal_spacing=config.topology.horizontal_spacing,
            vertical_spacing=config.topology.vertical_spacing,
            root_marker=config.topology.root_marker,
        )
        logger.debug(f"Container создан: backend={backend or config.storage.backend}")
        return cls(
            config=config,
            devices=stores["devices"],
            projects=stores["projects"],
            layouts=stores["layouts"],
            activity_store=stores["activity"],
            activity=activity,
            realtime=realtime,
            placement=placement,
            inventory=inventory,
            sync=sync,
            tree_builder=tree_builder,
        )

    async def seed_projects(self) -> int:
        """
        Создаёт проекты из секции projects конфигурации, если их ещё нет.

        Returns:
            int: Количество созданных проектов
        """
        created = 0
        for seed in self.config.projects:
            if await self.projects.get(seed.id) is not None:
                continue
            await self.projects.save(Project(id=seed.id, code=seed.code, name=seed.name, status=seed.status))
            created += 1
        if created:
            logger.info(f"Создано проектов из конфигурации: {created}")
        return created
