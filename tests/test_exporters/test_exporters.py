"""
Тесты экспортеров инвентаря и дерева топологии.

Проверяет что файлы создаются и содержат корректные данные.
"""

import csv
import json
from datetime import datetime, timezone

import pytest
from openpyxl import load_workbook

from gateway_inventory.core.config_schema import OutputConfig
from gateway_inventory.core.domain.topology import TreeLayoutBuilder
from gateway_inventory.core.models import CanvasConnection, CanvasElement, Device, DeviceMetadata
from gateway_inventory.exporters import (
    DEVICE_COLUMNS,
    CSVExporter,
    ExcelExporter,
    JSONExporter,
    device_rows,
    get_exporter,
    tree_rows,
)
from gateway_inventory.exporters.base import REPORT_TOPOLOGY
from gateway_inventory.exporters.csv_exporter import format_cell
from gateway_inventory.exporters.json_exporter import summarize_rows


@pytest.fixture
def devices():
    """Два устройства: камера online и мост offline."""
    return [
        Device(
            id="d1",
            project_id="site-9",
            name="塔吊摄像机",
            type="Camera",
            status="online",
            mac_address="00:11:22:33:44:66",
            ip_address="192.168.1.20",
            metadata=DeviceMetadata(
                model="DS-2CD",
                gateway_mac="00:11:22:33:44:55",
                extra_statuses=["signal-weak", "lens-dirty"],
            ),
            last_seen_at=datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
        ),
        Device(
            id="d2",
            project_id="site-9",
            name="Bridge-1",
            type="Bridge",
            status="offline",
            alias="North",
            metadata=DeviceMetadata(bridge_role="st"),
        ),
    ]


@pytest.fixture
def rows(devices):
    return device_rows(devices)


@pytest.mark.unit
class TestRows:
    """Подготовка плоских строк."""

    def test_device_rows(self, rows):
        assert rows[0]["mac"] == "00:11:22:33:44:66"
        assert rows[0]["model"] == "DS-2CD"
        assert rows[0]["extra_statuses"] == "signal-weak, lens-dirty"
        assert rows[0]["gateway_mac"] == "00:11:22:33:44:55"
        assert rows[0]["last_seen_at"] == "2024-05-01T10:00:00+00:00"
        assert rows[0]["hidden"] is False
        assert rows[1]["bridge_role"] == "ST"
        assert rows[1]["alias"] == "North"
        assert rows[1]["mac"] == ""
        assert set(rows[0]) == set(DEVICE_COLUMNS)

    def test_tree_rows(self):
        layout = TreeLayoutBuilder().build(
            [
                CanvasElement(id="sw", name="OFC-1", type="switch"),
                CanvasElement(id="cam", name="Cam", type="camera"),
            ],
            [CanvasConnection(id="c1", from_device_id="sw", to_device_id="cam")],
        )
        rows = tree_rows(layout)
        assert rows[0] == {
            "id": "sw", "name": "OFC-1", "type": "switch", "depth": 0,
            "x": 0, "y": 0, "parent_id": "", "bridge_role": "",
        }
        assert rows[1]["parent_id"] == "sw"
        assert rows[1]["depth"] == 1


class TestJSONExporter:
    """JSON экспорт."""

    def test_inventory_summary(self, tmp_path, rows):
        exporter = JSONExporter(output_folder=str(tmp_path), project_id="site-9")
        path = exporter.export(rows, "inventory")
        assert path.name == "inventory.json"
        content = json.loads(path.read_text(encoding="utf-8"))
        assert content["report"]["kind"] == "inventory"
        assert content["report"]["project_id"] == "site-9"
        assert content["summary"] == {
            "total": 2,
            "by_status": {"online": 1, "offline": 1},
            "hidden": 0,
        }
        assert content["rows"][0]["name"] == "塔吊摄像机"

    def test_topology_summary(self):
        rows = [
            {"id": "sw", "depth": 0, "parent_id": ""},
            {"id": "br", "depth": 1, "parent_id": "sw"},
            {"id": "cam", "depth": 2, "parent_id": "br"},
            {"id": "sw2", "depth": 0, "parent_id": ""},
        ]
        assert summarize_rows(REPORT_TOPOLOGY, rows) == {"total": 4, "roots": 2, "max_depth": 2}

    def test_plain_list(self, tmp_path, rows):
        exporter = JSONExporter(output_folder=str(tmp_path), with_summary=False)
        path = exporter.export(rows, "plain", columns=["id", "status"])
        content = json.loads(path.read_text(encoding="utf-8"))
        assert content == [{"id": "d1", "status": "online"}, {"id": "d2", "status": "offline"}]


class TestCSVExporter:
    """CSV экспорт."""

    def test_named_delimiter(self, tmp_path, rows):
        path = CSVExporter(output_folder=str(tmp_path), delimiter="semicolon").export(rows, "inv")
        with open(path, encoding="utf-8", newline="") as f:
            reader = list(csv.DictReader(f, delimiter=";"))
        assert len(reader) == 2
        assert reader[0]["extra_statuses"] == "signal-weak, lens-dirty"

    def test_bom(self, tmp_path, rows):
        path = CSVExporter(output_folder=str(tmp_path), add_bom=True).export(rows, "bom")
        assert path.read_bytes().startswith(b"\xef\xbb\xbf")

    def test_without_header(self, tmp_path, rows):
        exporter = CSVExporter(output_folder=str(tmp_path), include_header=False)
        path = exporter.export(rows, "nohdr", columns=["id"])
        assert path.read_text(encoding="utf-8").splitlines() == ["d1", "d2"]

    def test_cell_formatting(self, tmp_path, rows):
        """hidden как yes/no, целые координаты без дробной части."""
        exporter = CSVExporter(output_folder=str(tmp_path), include_header=False)
        path = exporter.export(rows, "fmt", columns=["id", "hidden"])
        assert path.read_text(encoding="utf-8").splitlines() == ["d1,no", "d2,no"]

        assert format_cell(440.0) == "440"
        assert format_cell(75.5) == "75.5"
        assert format_cell(["a", "b"]) == "a, b"
        assert format_cell(None) == ""


class TestExcelExporter:
    """Excel экспорт."""

    def test_header_and_colors(self, tmp_path, rows):
        path = ExcelExporter(output_folder=str(tmp_path)).export(rows, "inv", columns=DEVICE_COLUMNS)
        assert path.suffix == ".xlsx"

        wb = load_workbook(path)
        ws = wb.active
        headers = [cell.value for cell in ws[1]]
        assert ws.title == "Inventory"
        assert headers[:5] == ["ID", "NAME", "ALIAS", "TYPE", "STATUS"]
        status_col = headers.index("STATUS") + 1
        assert ws.cell(row=2, column=status_col).fill.start_color.rgb.endswith("C6EFCE")
        assert ws.cell(row=3, column=status_col).fill.start_color.rgb.endswith("FFC7CE")
        assert ws.freeze_panes == "A2"
        assert ws.auto_filter.ref
        wb.close()

    def test_custom_color_rules(self, tmp_path, rows):
        exporter = ExcelExporter(
            output_folder=str(tmp_path),
            autofilter=False,
            freeze_header=False,
            color_rules={"Type": {"BRIDGE": "DDEBF7"}},
        )
        path = exporter.export(rows, "colored", columns=["id", "type"])
        wb = load_workbook(path)
        ws = wb.active
        assert ws.cell(row=3, column=2).fill.start_color.rgb.endswith("DDEBF7")
        assert ws.freeze_panes is None
        wb.close()


class TestExportEdgeCases:
    """Пустые данные, ошибки записи, фабрика."""

    def test_empty_data(self, tmp_path):
        assert JSONExporter(output_folder=str(tmp_path)).export([]) is None

    def test_generated_filename(self, tmp_path, rows):
        path = CSVExporter(output_folder=str(tmp_path)).export(rows)
        assert path.name.startswith("inventory_")
        tree_path = CSVExporter(output_folder=str(tmp_path), report=REPORT_TOPOLOGY).export(rows)
        assert tree_path.name.startswith("topology_")
        assert path.suffix == ".csv"

    def test_write_error(self, tmp_path, rows, monkeypatch):
        exporter = CSVExporter(output_folder=str(tmp_path))

        def _fail(data, file_path):
            raise PermissionError("read-only")

        monkeypatch.setattr(exporter, "_write", _fail)
        assert exporter.export(rows, "x") is None

    def test_get_exporter(self, tmp_path):
        output = OutputConfig(output_folder=str(tmp_path), csv_delimiter="tab", default_format="csv")
        exporter = get_exporter(output=output)
        assert isinstance(exporter, CSVExporter)
        assert exporter.delimiter == "\t"
        assert isinstance(get_exporter("EXCEL", output), ExcelExporter)
        assert isinstance(get_exporter("json", output), JSONExporter)

    def test_get_exporter_unknown(self):
        with pytest.raises(ValueError, match="Unknown export format"):
            get_exporter("xml")
