"""
Экспорт инвентаря и дерева топологии в файлы.

Форматы: json, csv, excel.
"""

from typing import Optional

from ..core.config_schema import OutputConfig
from .base import (
    DEVICE_COLUMNS,
    REPORT_INVENTORY,
    REPORT_TOPOLOGY,
    BaseExporter,
    device_rows,
    tree_rows,
)
from .csv_exporter import CSVExporter
from .excel import ExcelExporter
from .json_exporter import JSONExporter

EXPORT_FORMATS = ("excel", "csv", "json")


def get_exporter(
    fmt: Optional[str] = None,
    output: Optional[OutputConfig] = None,
    report: str = REPORT_INVENTORY,
    project_id: Optional[str] = None,
) -> BaseExporter:
    """
    Создаёт экспортер по имени формата с настройками секции output.

    Args:
        fmt: json | csv | excel (None — output.default_format)
        output: Секция output конфигурации
        report: inventory | topology
        project_id: Проект отчёта (попадает в заголовок JSON)

    Raises:
        ValueError: Неизвестный формат
    """
    output = output or OutputConfig()
    fmt = (fmt or output.default_format).lower()
    if fmt == "csv":
        return CSVExporter(
            output_folder=output.output_folder,
            encoding=output.csv_encoding,
            delimiter=output.csv_delimiter,
            report=report,
            project_id=project_id,
        )
    if fmt == "excel":
        return ExcelExporter(
            output_folder=output.output_folder,
            autofilter=output.excel_autofilter,
            freeze_header=output.excel_freeze_header,
            report=report,
            project_id=project_id,
        )
    if fmt == "json":
        return JSONExporter(output_folder=output.output_folder, report=report, project_id=project_id)
    raise ValueError(f"Unknown export format: {fmt}. Supported: {', '.join(EXPORT_FORMATS)}")


__all__ = [
    "BaseExporter",
    "CSVExporter",
    "DEVICE_COLUMNS",
    "EXPORT_FORMATS",
    "REPORT_INVENTORY",
    "REPORT_TOPOLOGY",
    "ExcelExporter",
    "JSONExporter",
    "device_rows",
    "tree_rows",
    "get_exporter",
]
