"""
Команда export.

Выгрузка инвентаря проекта в excel / csv / json.
"""

import asyncio
import logging

from ...exporters import DEVICE_COLUMNS, device_rows, get_exporter
from ..utils import build_container

logger = logging.getLogger(__name__)


def cmd_export(args, config, ctx=None) -> None:
    """Обработчик команды export."""
    container = build_container(config, args.storage)
    devices = asyncio.run(
        container.inventory.list_devices(args.project_id, include_hidden=args.include_hidden)
    )
    logger.info(f"Устройств в проекте {args.project_id}: {len(devices)}")

    exporter = get_exporter(args.format, config.output, project_id=args.project_id)
    path = exporter.export(
        device_rows(devices),
        args.filename or f"inventory_{args.project_id}",
        columns=DEVICE_COLUMNS,
    )
    if path:
        print(f"✓ {path}")
