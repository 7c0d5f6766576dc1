"""
Базовый класс экспортера.

Экспортеры пишут список плоских строк (dict) в файл.
Строки для инвентаря и дерева готовят device_rows / tree_rows.

Пример:
    exporter = CSVExporter(output_folder="reports")
    exporter.export(device_rows(devices), "inventory_site9")
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..core.domain.topology import TreeLayout
from ..core.models import Device

logger = logging.getLogger(__name__)

REPORT_INVENTORY = "inventory"
REPORT_TOPOLOGY = "topology"

DEVICE_COLUMNS = [
    "id", "name", "alias", "type", "status", "mac", "ip", "model",
    "bridge_role", "extra_statuses", "gateway_mac", "last_seen_at", "hidden",
]


def device_rows(devices: Iterable[Device]) -> List[Dict[str, Any]]:
    """Плоские строки инвентаря."""
    rows = []
    for device in devices:
        extra_statuses = device.metadata.extra_statuses or []
        rows.append({
            "id": device.id,
            "name": device.name,
            "alias": device.alias or "",
            "type": device.type,
            "status": device.status,
            "mac": device.mac_address or "",
            "ip": device.ip_address or "",
            "model": device.model or "",
            "bridge_role": device.bridge_role or "",
            "extra_statuses": ", ".join(extra_statuses),
            "gateway_mac": device.metadata.gateway_mac or "",
            "last_seen_at": device.last_seen_at.isoformat() if device.last_seen_at else "",
            "hidden": device.is_hidden,
        })
    return rows


def tree_rows(layout: TreeLayout) -> List[Dict[str, Any]]:
    """Плоские строки узлов дерева топологии."""
    return [
        {
            "id": node.id,
            "name": node.element.name,
            "type": node.element.type,
            "depth": node.depth,
            "x": node.x,
            "y": node.y,
            "parent_id": node.parent_id or "",
            "bridge_role": node.bridge_role or "",
        }
        for node in layout.nodes
    ]


class BaseExporter(ABC):
    """
    Абстрактный экспортер.

    Attributes:
        output_folder: Папка для сохранения файлов
        encoding: Кодировка файлов
        report: Вид отчёта (inventory | topology)
        project_id: Проект, к которому относится отчёт
    """

    file_extension: str = ".txt"

    def __init__(
        self,
        output_folder: str = "reports",
        encoding: str = "utf-8",
        report: str = REPORT_INVENTORY,
        project_id: Optional[str] = None,
    ):
        self.output_folder = Path(output_folder)
        self.encoding = encoding
        self.report = report
        self.project_id = project_id

    def export(
        self,
        data: List[Dict[str, Any]],
        filename: Optional[str] = None,
        columns: Optional[List[str]] = None,
    ) -> Optional[Path]:
        """
        Экспортирует строки в файл.

        Args:
            data: Список словарей
            filename: Имя файла без пути (None — генерируется по дате)
            columns: Порядок и набор колонок (None — все в порядке появления)

        Returns:
            Path к файлу или None если данных нет / запись не удалась
        """
        if not data:
            logger.warning("Нет данных для экспорта")
            return None

        self.output_folder.mkdir(parents=True, exist_ok=True)
        filename = filename or self._generate_filename()
        if not filename.endswith(self.file_extension):
            filename += self.file_extension
        file_path = self.output_folder / filename

        if columns:
            data = [{c: row.get(c, "") for c in columns} for row in data]

        try:
            self._write(data, file_path)
        except OSError as e:
            logger.error(f"Ошибка экспорта в {file_path}: {e}")
            return None
        logger.info(f"Данные экспортированы: {file_path}")
        return file_path

    @abstractmethod
    def _write(self, data: List[Dict[str, Any]], file_path: Path) -> None:
        """Записывает данные в файл."""

    def _generate_filename(self) -> str:
        return f"{self.report}_{datetime.now().strftime('%Y-%m-%d_%H%M%S')}"

    def _get_all_columns(self, data: List[Dict[str, Any]]) -> List[str]:
        """Все колонки в порядке появления."""
        columns: List[str] = []
        for row in data:
            for key in row:
                if key not in columns:
                    columns.append(key)
        return columns
