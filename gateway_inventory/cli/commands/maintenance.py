"""
Команды обслуживания инвентаря.

dedupe-switches — удаляет дубли коммутаторов (тип + имя), оставляя старейший.
purge-without-mac — удаляет устройства без MAC кроме коммутаторов.
"""

import asyncio
import logging

from ..utils import build_container

logger = logging.getLogger(__name__)


def _report(title: str, removed_ids) -> None:
    print(f"{title}: {len(removed_ids)}")
    for device_id in removed_ids:
        print(f"  - {device_id}")


def cmd_dedupe_switches(args, config, ctx=None) -> None:
    """Обработчик команды dedupe-switches."""
    container = build_container(config, args.storage)
    removed = asyncio.run(container.inventory.deduplicate_switches(args.project_id))
    _report("Удалено дублей коммутаторов", removed)


def cmd_purge_without_mac(args, config, ctx=None) -> None:
    """Обработчик команды purge-without-mac."""
    container = build_container(config, args.storage)
    removed = asyncio.run(container.inventory.purge_devices_without_mac(args.project_id))
    _report("Удалено устройств без MAC", removed)
