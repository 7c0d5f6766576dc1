"""
Тесты DeviceInventoryService (services/inventory.py).

Тестируем:
- register_or_update — поиск существующего, слияние, создание
- create_switch / update_device / rename_device / remove_device
- списки и обслуживание (дубли коммутаторов, устройства без MAC)
"""

import pytest

from gateway_inventory.core.exceptions import ConflictError, NotFoundError, ValidationError
from gateway_inventory.core.models import (
    CanvasElement,
    DeviceChanges,
    LayoutVersion,
    RegisterContext,
    RegisterPayload,
)
from gateway_inventory.services.inventory import normalize_register_type, synthesize_name, to_base36

PROJECT = "site-9"
SYNC = RegisterContext(source="sync")


async def _place(container, **element_kwargs):
    """Размещает элемент на схеме l1 проекта."""
    await container.layouts.save_version(LayoutVersion(
        id="v1",
        layout_id="l1",
        project_id=PROJECT,
        elements=[CanvasElement(id="e1", name="placed", type="camera", **element_kwargs)],
    ))


async def _actions(container):
    return [e.action for e in await container.activity.list_entries(PROJECT)]


@pytest.mark.unit
class TestHelpers:
    """Тесты вспомогательных функций."""

    def test_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "z"
        assert to_base36(36) == "10"

    def test_register_type(self):
        assert normalize_register_type(" IPC ") == "Camera"
        assert normalize_register_type("router") == "Router"
        with pytest.raises(ValidationError):
            normalize_register_type("  ")

    def test_synthesize_name_order(self):
        assert synthesize_name("Camera", "Gate", "X", "10.0.0.1") == "Gate"
        assert synthesize_name("Camera", None, "X", "10.0.0.1") == "Camera-X"
        assert synthesize_name("Camera", None, None, "10.0.0.1") == "Camera-10.0.0.1"
        assert synthesize_name("Camera", None, None, None).startswith("Camera-")


class TestRegisterOrUpdate:
    """Тесты merge-or-create."""

    async def test_create(self, container):
        device = await container.inventory.register_or_update(
            PROJECT,
            RegisterPayload(type="camera", model="DS-2CD", mac_address="00-11-22-33-44-66"),
        )
        assert device.id
        assert device.name == "Camera-DS-2CD"
        assert device.type == "Camera"
        assert device.status == "unknown"
        assert device.mac_address == "00:11:22:33:44:66"
        assert device.model == "DS-2CD"
        assert device.last_seen_at is not None
        assert await _actions(container) == ["device.create"]

    async def test_merge_by_mac(self, container):
        """Тот же MAC в любом формате — то же устройство."""
        first = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", name="Gate", mac_address="00:11:22:33:44:66"), SYNC,
        )
        second = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", name="Gate 2", mac_address="0011.2233.4466", status="online"), SYNC,
        )
        assert second.id == first.id
        assert second.name == "Gate 2"
        assert second.status == "online"
        assert len(await container.inventory.list_devices(PROJECT)) == 1

    async def test_merge_by_ip_without_mac(self, container):
        first = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="nvr", ip_address="10.0.0.20"),
        )
        second = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="nvr", ip_address=" 10.0.0.20 ", model="NVR-8"),
        )
        assert second.id == first.id
        assert second.model == "NVR-8"

    async def test_merge_by_type_and_name(self, container):
        first = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Gate"))
        second = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="Camera", name="Gate"))
        assert second.id == first.id

    async def test_projects_isolated(self, container):
        """Один MAC в разных проектах — разные устройства."""
        payload = RegisterPayload(type="camera", mac_address="00:11:22:33:44:66")
        a = await container.inventory.register_or_update(PROJECT, payload)
        b = await container.inventory.register_or_update("site-12", payload)
        assert a.id != b.id

    async def test_free_form_type(self, container):
        device = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="router", name="R1"))
        assert device.type == "Router"

    @pytest.mark.parametrize("payload,field", [
        (RegisterPayload(type="camera", ip_address="300.1.1.1"), "ipAddress"),
        (RegisterPayload(type="camera", mac_address="0011.2233"), "macAddress"),
        (RegisterPayload(type="camera", status="broken"), "status"),
        (RegisterPayload(type=""), "type"),
    ])
    async def test_invalid_payload(self, container, payload, field):
        with pytest.raises(ValidationError) as exc_info:
            await container.inventory.register_or_update(PROJECT, payload)
        assert exc_info.value.field == field

    async def test_sync_requires_mac(self, container):
        with pytest.raises(ValidationError):
            await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera"), SYNC)

    async def test_metadata_patch_merged(self, container):
        await container.inventory.register_or_update(
            PROJECT,
            RegisterPayload(type="camera", mac_address="00:11:22:33:44:66", model="A"),
            RegisterContext(source="sync", metadata_patch={"gatewayMac": "00:11:22:33:44:55", "firmware": "v1"}),
        )
        device = await container.inventory.register_or_update(
            PROJECT,
            RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
            RegisterContext(source="sync", metadata_patch={"extraStatuses": ["poe"]}),
        )
        metadata = device.metadata.to_dict()
        assert metadata["model"] == "A"
        assert metadata["gatewayMac"] == "00:11:22:33:44:55"
        assert metadata["firmware"] == "v1"
        assert metadata["extraStatuses"] == ["poe"]

    async def test_model_change_audited(self, container):
        payload = RegisterPayload(type="camera", mac_address="00:11:22:33:44:66", model="A")
        await container.inventory.register_or_update(PROJECT, payload)
        payload.model = "B"
        await container.inventory.register_or_update(PROJECT, payload)
        entries = await container.activity.list_entries(PROJECT)
        changed = [e for e in entries if e.action == "device.model_changed"]
        assert len(changed) == 1
        assert changed[0].details["previousModel"] == "A"
        assert changed[0].details["currentModel"] == "B"

    async def test_merge_unhides(self, container):
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
        )
        await container.inventory.remove_device(PROJECT, device.id)
        again = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"), SYNC,
        )
        assert again.id == device.id
        assert not again.is_hidden

    async def test_emits_realtime_update(self, container):
        queue = container.realtime.subscribe(PROJECT)
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", name="Gate", model="X", ip_address="10.0.0.5"),
        )
        message = queue.get_nowait()
        assert message == {
            "event": "device.update",
            "data": {"id": device.id, "name": "Gate", "type": "Camera", "ip": "10.0.0.5", "status": "unknown", "model": "X"},
        }


class TestUserOperations:
    """Тесты пользовательских операций."""

    async def test_create_switch(self, container):
        switch = await container.inventory.create_switch(PROJECT, "  Core-1 ")
        assert switch.name == "Core-1"
        assert switch.type == "Switch"
        assert switch.mac_address is None

    async def test_create_switch_duplicate(self, container):
        await container.inventory.create_switch(PROJECT, "Core-1")
        with pytest.raises(ConflictError):
            await container.inventory.create_switch(PROJECT, "core-1")

    async def test_create_switch_empty_name(self, container):
        with pytest.raises(ValidationError):
            await container.inventory.create_switch(PROJECT, "   ")

    async def test_update_device(self, container):
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="bridge", name="B1", mac_address="00:11:22:33:44:77"),
        )
        updated = await container.inventory.update_device(
            PROJECT, device.id, DeviceChanges(bridge_role="st", status="Warning", ip_address="10.0.0.7"),
        )
        assert updated.bridge_role == "ST"
        assert updated.status == "warning"
        assert updated.ip_address == "10.0.0.7"

    async def test_type_change_clears_bridge_role(self, container):
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="bridge", name="B1"),
            RegisterContext(metadata_patch={"bridgeRole": "AP"}),
        )
        assert device.bridge_role == "AP"
        updated = await container.inventory.update_device(PROJECT, device.id, DeviceChanges(type="camera"))
        assert updated.type == "Camera"
        assert updated.bridge_role is None

    @pytest.mark.parametrize("changes", [
        DeviceChanges(name="  "),
        DeviceChanges(type="router"),
        DeviceChanges(ip_address="1.2.3"),
        DeviceChanges(status="dead"),
        DeviceChanges(bridge_role="mesh"),
    ])
    async def test_update_invalid(self, container, changes):
        device = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="bridge", name="B1"))
        with pytest.raises(ValidationError):
            await container.inventory.update_device(PROJECT, device.id, changes)

    async def test_update_missing(self, container):
        with pytest.raises(NotFoundError):
            await container.inventory.update_device(PROJECT, "nope", DeviceChanges(name="x"))

    async def test_update_placed_rejected(self, container):
        device = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Gate"))
        await _place(container, device_id=device.id)
        with pytest.raises(ConflictError):
            await container.inventory.update_device(PROJECT, device.id, DeviceChanges(name="x"))

    async def test_rename(self, container):
        device = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Gate"))
        renamed = await container.inventory.rename_device(PROJECT, device.id, " North gate ")
        assert renamed.alias == "North gate"
        cleared = await container.inventory.rename_device(PROJECT, device.id, "")
        assert cleared.alias is None

    async def test_rename_switch_rejected(self, container):
        switch = await container.inventory.create_switch(PROJECT, "Core")
        with pytest.raises(ValidationError):
            await container.inventory.rename_device(PROJECT, switch.id, "x")

    async def test_remove_soft(self, container):
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
        )
        queue = container.realtime.subscribe(PROJECT)
        assert await container.inventory.remove_device(PROJECT, device.id) is True
        assert await container.inventory.list_devices(PROJECT) == []
        hidden = await container.inventory.list_devices(PROJECT, include_hidden=True)
        assert hidden[0].is_hidden
        assert queue.get_nowait() == {"event": "device.remove", "data": {"id": device.id, "mac": "00:11:22:33:44:66"}}

    async def test_remove_purge(self, container):
        device = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Gate"))
        await container.inventory.remove_device(PROJECT, device.id, purge=True)
        assert await container.inventory.list_devices(PROJECT, include_hidden=True) == []

    async def test_remove_missing_is_noop(self, container):
        assert await container.inventory.remove_device(PROJECT, "nope") is False

    async def test_remove_placed_rejected(self, container):
        device = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
        )
        await _place(container, device_mac="00:11:22:33:44:66")
        with pytest.raises(ConflictError):
            await container.inventory.remove_device(PROJECT, device.id)


class TestListsAndMaintenance:
    """Тесты списков и обслуживания."""

    async def test_available_excludes_placed(self, container):
        placed = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
        )
        free = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Free"))
        await _place(container, device_mac="00:11:22:33:44:66")
        available = await container.inventory.list_available_devices(PROJECT)
        assert [d.id for d in available] == [free.id]
        assert placed.id not in [d.id for d in available]

    async def test_deduplicate_switches_keeps_oldest(self, container):
        first = await container.inventory.create_switch(PROJECT, "Core")
        duplicate = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="switch", name="CORE"))
        removed = await container.inventory.deduplicate_switches(PROJECT)
        assert removed == [duplicate.id]
        remaining = await container.inventory.list_devices(PROJECT)
        assert [d.id for d in remaining] == [first.id]

    async def test_purge_without_mac_keeps_switches(self, container):
        switch = await container.inventory.create_switch(PROJECT, "Core")
        orphan = await container.inventory.register_or_update(PROJECT, RegisterPayload(type="camera", name="Gate"))
        keeper = await container.inventory.register_or_update(
            PROJECT, RegisterPayload(type="camera", mac_address="00:11:22:33:44:66"),
        )
        removed = await container.inventory.purge_devices_without_mac()
        assert removed == [orphan.id]
        ids = {d.id for d in await container.inventory.list_devices(PROJECT)}
        assert ids == {switch.id, keeper.id}
