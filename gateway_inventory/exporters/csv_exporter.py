"""
CSV экспортер отчётов.

Значения приводятся к виду, удобному для таблиц:
hidden -> yes/no, координаты дерева без ".0", списки через запятую.

Пример:
    exporter = CSVExporter(delimiter="semicolon", add_bom=True)  # для Excel
    exporter.export(device_rows(devices), "inventory")
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import REPORT_INVENTORY, BaseExporter

logger = logging.getLogger(__name__)

DELIMITERS = {
    "comma": ",",
    "semicolon": ";",
    "tab": "\t",
    "pipe": "|",
}


def format_cell(value: Any) -> str:
    """Ячейка CSV для значения строки отчёта."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


class CSVExporter(BaseExporter):
    """
    Экспорт в CSV.

    Attributes:
        delimiter: Разделитель или его имя (comma, semicolon, tab, pipe)
        include_header: Строка заголовка
    """

    file_extension = ".csv"

    def __init__(
        self,
        output_folder: str = "reports",
        encoding: str = "utf-8",
        delimiter: str = ",",
        include_header: bool = True,
        add_bom: bool = False,
        report: str = REPORT_INVENTORY,
        project_id: Optional[str] = None,
    ):
        if add_bom and encoding == "utf-8":
            encoding = "utf-8-sig"
        super().__init__(output_folder, encoding, report=report, project_id=project_id)
        self.delimiter = DELIMITERS.get(delimiter, delimiter)
        self.include_header = include_header

    def _write(self, data: List[Dict[str, Any]], file_path: Path) -> None:
        columns = self._get_all_columns(data)
        with open(file_path, "w", newline="", encoding=self.encoding) as f:
            writer = csv.writer(f, delimiter=self.delimiter)
            if self.include_header:
                writer.writerow(columns)
            for row in data:
                writer.writerow([format_cell(row.get(column)) for column in columns])
        logger.debug(f"CSV отчёт {self.report}: {len(data)} строк, {len(columns)} колонок")
