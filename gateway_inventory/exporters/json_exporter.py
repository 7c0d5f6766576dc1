"""
JSON экспортер отчётов инвентаря и дерева топологии.

Формат с заголовком:
    {
        "report": {"kind": "inventory", "project_id": "site-9", "generated_at": ...},
        "summary": {"total": 2, "by_status": {"online": 1, "offline": 1}},
        "rows": [...]
    }
Для дерева summary содержит roots и max_depth вместо by_status.

Пример:
    exporter = JSONExporter(project_id="site-9")
    exporter.export(device_rows(devices), "inventory_site-9")
"""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import REPORT_TOPOLOGY, REPORT_INVENTORY, BaseExporter

logger = logging.getLogger(__name__)


def summarize_rows(report: str, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Сводка по строкам отчёта.

    inventory: количество по статусам и скрытых устройств.
    topology: число корней (узлы без parent_id) и максимальная глубина.
    """
    summary: Dict[str, Any] = {"total": len(rows)}
    if report == REPORT_TOPOLOGY:
        summary["roots"] = sum(1 for row in rows if not row.get("parent_id"))
        summary["max_depth"] = max((row.get("depth", 0) for row in rows), default=0)
        return summary
    summary["by_status"] = dict(Counter(row.get("status") or "unknown" for row in rows))
    summary["hidden"] = sum(1 for row in rows if row.get("hidden") is True)
    return summary


class JSONExporter(BaseExporter):
    """
    Экспорт отчёта в JSON.

    Attributes:
        indent: Отступ (None — компактный вывод)
        with_summary: Заголовок report/summary; без него пишется голый список строк
    """

    file_extension = ".json"

    def __init__(
        self,
        output_folder: str = "reports",
        report: str = REPORT_INVENTORY,
        project_id: Optional[str] = None,
        indent: Optional[int] = 2,
        with_summary: bool = True,
    ):
        super().__init__(output_folder, "utf-8", report=report, project_id=project_id)
        self.indent = indent
        self.with_summary = with_summary

    def _write(self, data: List[Dict[str, Any]], file_path: Path) -> None:
        output: Any = data
        if self.with_summary:
            output = {
                "report": {
                    "kind": self.report,
                    "project_id": self.project_id,
                    "generated_at": datetime.now(timezone.utc).isoformat(),
                },
                "summary": summarize_rows(self.report, data),
                "rows": data,
            }

        # Русские и китайские имена устройств пишутся как есть
        with open(file_path, "w", encoding=self.encoding) as f:
            json.dump(output, f, indent=self.indent, ensure_ascii=False, default=str)
        logger.debug(f"JSON отчёт {self.report}: {len(data)} строк")
