"""
Тесты хранилищ (store/memory.py, store/json_store.py).
"""

import json

import pytest

from gateway_inventory.core.exceptions import ConflictError, StoreError
from gateway_inventory.core.models import (
    ActivityLogEntry,
    CanvasElement,
    Device,
    DeviceMetadata,
    LayoutVersion,
    Project,
)
from gateway_inventory.store import create_stores
from gateway_inventory.store.json_store import JsonDeviceStore, JsonFile
from gateway_inventory.store.memory import InMemoryActivityLogStore, InMemoryDeviceStore


def _camera(mac=None, name="Cam", project_id="p1"):
    return Device(project_id=project_id, name=name, type="Camera", mac_address=mac)


class TestInMemoryDeviceStore:
    """Тесты InMemoryDeviceStore."""

    async def test_save_assigns_id_and_timestamps(self):
        store = InMemoryDeviceStore()
        saved = await store.save(_camera("00:11:22:33:44:66"))
        assert saved.id
        assert saved.created_at is not None
        assert saved.updated_at is not None

    async def test_returns_copies(self):
        """Изменение возвращённого объекта не меняет хранилище."""
        store = InMemoryDeviceStore()
        saved = await store.save(_camera())
        saved.name = "changed"
        assert (await store.get("p1", saved.id)).name == "Cam"

    async def test_mac_unique_per_project(self):
        store = InMemoryDeviceStore()
        await store.save(_camera("00:11:22:33:44:66"))
        with pytest.raises(ConflictError):
            await store.save(_camera("00:11:22:33:44:66", name="Other"))
        await store.save(_camera("00:11:22:33:44:66", project_id="p2"))

    async def test_find_by_mac_case_insensitive(self):
        store = InMemoryDeviceStore()
        saved = await store.save(_camera("AA:BB:CC:DD:EE:FF"))
        assert (await store.find_by_mac("p1", "aa:bb:cc:dd:ee:ff")).id == saved.id
        assert await store.find_by_mac("p2", "aa:bb:cc:dd:ee:ff") is None

    async def test_get_wrong_project(self):
        store = InMemoryDeviceStore()
        saved = await store.save(_camera())
        assert await store.get("p2", saved.id) is None

    async def test_created_at_preserved_on_update(self):
        store = InMemoryDeviceStore()
        saved = await store.save(_camera())
        created = saved.created_at
        saved.created_at = None
        updated = await store.save(saved)
        assert updated.created_at == created

    async def test_delete(self):
        store = InMemoryDeviceStore()
        a = await store.save(_camera(name="a"))
        await store.save(_camera(name="b"))
        assert await store.delete([a.id, "missing"]) == 1
        assert [d.name for d in await store.list_all()] == ["b"]


class TestInMemoryActivityLogStore:
    """Тесты журнала в памяти."""

    async def test_newest_first_and_limit(self):
        store = InMemoryActivityLogStore(limit=3)
        for i in range(5):
            await store.append(ActivityLogEntry(project_id="p1", action=f"a{i}"))
        entries = await store.list()
        assert [e.action for e in entries] == ["a4", "a3", "a2"]

    async def test_filter_by_project(self):
        store = InMemoryActivityLogStore()
        await store.append(ActivityLogEntry(project_id="p1", action="x"))
        await store.append(ActivityLogEntry(project_id="p2", action="y"))
        assert [e.action for e in await store.list("p1")] == ["x"]


class TestJsonStores:
    """Тесты JSON хранилищ."""

    async def test_devices_persist_between_instances(self, tmp_path):
        store = JsonDeviceStore(tmp_path)
        saved = await store.save(Device(
            project_id="p1",
            name="塔吊摄像机",
            type="Camera",
            mac_address="00:11:22:33:44:66",
            metadata=DeviceMetadata(extra_statuses=["signal-weak"], extra={"firmware": "v5"}),
        ))

        reopened = JsonDeviceStore(tmp_path)
        loaded = await reopened.get("p1", saved.id)
        assert loaded.name == "塔吊摄像机"
        assert loaded.metadata.extra_statuses == ["signal-weak"]
        assert loaded.metadata.extra == {"firmware": "v5"}
        assert loaded.created_at == saved.created_at

        raw = json.loads((tmp_path / "devices.json").read_text(encoding="utf-8"))
        assert raw[0]["mac_address"] == "00:11:22:33:44:66"

    async def test_corrupt_file_starts_empty(self, tmp_path):
        (tmp_path / "devices.json").write_text("{not json", encoding="utf-8")
        store = JsonDeviceStore(tmp_path)
        assert await store.list_all() == []

    async def test_bad_rows_skipped(self, tmp_path):
        rows = [{"id": "d1", "project_id": "p1", "name": "ok", "type": "Camera"}, {"id": "d2"}]
        (tmp_path / "devices.json").write_text(json.dumps(rows), encoding="utf-8")
        store = JsonDeviceStore(tmp_path)
        assert [d.id for d in await store.list_all()] == ["d1"]

    async def test_all_stores(self, tmp_path):
        stores = create_stores("json", data_dir=tmp_path, activity_log_limit=10)
        await stores["projects"].save(Project(id="site-9", code=9, name="Site"))
        await stores["layouts"].save_version(LayoutVersion(
            id="v1", layout_id="l1", project_id="site-9",
            elements=[CanvasElement(id="e1", name="OFC", type="switch", device_id="d1")],
        ))
        await stores["activity"].append(ActivityLogEntry(project_id="site-9", action="device.sync"))

        reopened = create_stores("json", data_dir=tmp_path)
        project = await reopened["projects"].find_active_by_code(9)
        assert project.id == "site-9"
        version = await reopened["layouts"].get_current_version("site-9", "l1")
        assert version.elements[0].device_id == "d1"
        entries = await reopened["activity"].list("site-9")
        assert entries[0].action == "device.sync"

    def test_unknown_backend(self):
        with pytest.raises(StoreError):
            create_stores("redis")

    def test_write_is_atomic(self, tmp_path):
        json_file = JsonFile(tmp_path / "nested" / "rows.json")
        json_file.write([{"a": 1}])
        assert json_file.read() == [{"a": 1}]
        assert list((tmp_path / "nested").iterdir()) == [tmp_path / "nested" / "rows.json"]

    def test_non_list_file(self, tmp_path):
        (tmp_path / "rows.json").write_text('{"a": 1}', encoding="utf-8")
        assert JsonFile(tmp_path / "rows.json").read() == []
