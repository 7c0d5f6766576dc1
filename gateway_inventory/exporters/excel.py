"""
Excel экспортер с форматированием.

Заголовок со стилем, автофильтр, закреплённая первая строка,
цвет ячейки status (online / offline / warning), автоширина колонок.

Пример:
    exporter = ExcelExporter(sheet_title="Inventory")
    exporter.export(device_rows(devices), "inventory")
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .base import REPORT_INVENTORY, BaseExporter

logger = logging.getLogger(__name__)

COLORS = {
    "header_bg": "4472C4",
    "header_font": "FFFFFF",
    "online": "C6EFCE",
    "offline": "FFC7CE",
    "warning": "FFEB9C",
}

MAX_COLUMN_WIDTH = 50


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


class ExcelExporter(BaseExporter):
    """
    Экспорт в xlsx через openpyxl.

    Attributes:
        sheet_title: Имя листа (по умолчанию вид отчёта: Inventory, Topology)
        autofilter: Автофильтр по всему диапазону
        freeze_header: Закрепить строку заголовка
        color_rules: Дополнительные правила {column: {value: color_hex}}
    """

    file_extension = ".xlsx"

    def __init__(
        self,
        output_folder: str = "reports",
        sheet_title: Optional[str] = None,
        autofilter: bool = True,
        freeze_header: bool = True,
        color_rules: Optional[Dict[str, Dict[str, str]]] = None,
        report: str = REPORT_INVENTORY,
        project_id: Optional[str] = None,
    ):
        super().__init__(output_folder, encoding="utf-8", report=report, project_id=project_id)
        self.sheet_title = sheet_title or report.capitalize()
        self.autofilter = autofilter
        self.freeze_header = freeze_header
        self.color_rules = {
            "status": {s: COLORS[s] for s in ("online", "offline", "warning")},
        }
        for column, rules in (color_rules or {}).items():
            self.color_rules.setdefault(column.lower(), {}).update(
                {k.lower(): v for k, v in rules.items()}
            )

        self.header_font = Font(bold=True, color=COLORS["header_font"])
        self.header_fill = _fill(COLORS["header_bg"])
        self.header_alignment = Alignment(horizontal="center", vertical="center")
        side = Side(style="thin", color="D9D9D9")
        self.cell_border = Border(left=side, right=side, top=side, bottom=side)

    def _write(self, data: List[Dict[str, Any]], file_path: Path) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_title
        columns = self._get_all_columns(data)

        for col_idx, column in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=col_idx, value=column.upper())
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_alignment
            cell.border = self.cell_border

        for row_idx, row in enumerate(data, start=2):
            for col_idx, column in enumerate(columns, start=1):
                value = row.get(column, "")
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border
                color = self._color_for(column, value)
                if color:
                    cell.fill = _fill(color)

        self._adjust_column_widths(ws, columns, data)
        if self.autofilter:
            ws.auto_filter.ref = ws.dimensions
        if self.freeze_header:
            ws.freeze_panes = "A2"

        wb.save(file_path)
        logger.debug(f"Excel записан: {len(data)} строк, {len(columns)} колонок")

    def _color_for(self, column: str, value: Any) -> Optional[str]:
        rules = self.color_rules.get(column.lower())
        if not rules:
            return None
        return rules.get(str(value).lower())

    def _adjust_column_widths(self, ws, columns: List[str], data: List[Dict[str, Any]]) -> None:
        for col_idx, column in enumerate(columns, start=1):
            max_length = len(column)
            for row in data:
                max_length = max(max_length, len(str(row.get(column, ""))))
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, MAX_COLUMN_WIDTH)
