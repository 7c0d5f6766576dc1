"""
Devices routes — устройства проекта.

GET    /api/projects/{project_id}/devices                   — доступные для размещения
POST   /api/projects/{project_id}/devices/register          — merge-or-create
POST   /api/projects/{project_id}/devices/switches          — коммутатор по имени
PATCH  /api/projects/{project_id}/devices/{device_id}       — правка
PUT    /api/projects/{project_id}/devices/{device_id}/alias — псевдоним
DELETE /api/projects/{project_id}/devices/{device_id}       — скрыть (или purge=true)
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ...core.constants import SOURCE_MANUAL
from ...core.models import Device, DeviceChanges, RegisterContext, RegisterPayload
from ...services.inventory import DeviceInventoryService
from ..dependencies import get_inventory
from ..schemas import AliasUpdate, DeviceRegister, DeviceUpdate, DeviceView, SuccessResponse, SwitchCreate

router = APIRouter()


def _view(device: Device) -> DeviceView:
    return DeviceView(**device.to_view())


@router.get("/{project_id}/devices", response_model=List[DeviceView])
async def list_available_devices(
    project_id: str,
    include_placed: bool = Query(False, alias="includePlaced"),
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Нескрытые устройства проекта (по умолчанию только не размещённые на схемах)."""
    if include_placed:
        devices = await inventory.list_devices(project_id)
    else:
        devices = await inventory.list_available_devices(project_id)
    return [_view(d) for d in devices]


@router.post("/{project_id}/devices/register", response_model=DeviceView)
async def register_device(
    project_id: str,
    body: DeviceRegister,
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Ручная регистрация устройства."""
    payload = RegisterPayload(
        type=body.type,
        name=body.name,
        model=body.model,
        ip_address=body.ip_address,
        mac_address=body.mac_address,
        status=body.status,
    )
    device = await inventory.register_or_update(project_id, payload, RegisterContext(source=SOURCE_MANUAL))
    return _view(device)


@router.post("/{project_id}/devices/switches", response_model=DeviceView, status_code=201)
async def create_switch(
    project_id: str,
    body: SwitchCreate,
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Коммутатор по имени (имя уникально без учёта регистра)."""
    return _view(await inventory.create_switch(project_id, body.name))


@router.patch("/{project_id}/devices/{device_id}", response_model=DeviceView)
async def update_device(
    project_id: str,
    device_id: str,
    body: DeviceUpdate,
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Правка устройства (запрещена для размещённых)."""
    changes = DeviceChanges(
        name=body.name,
        type=body.type,
        ip_address=body.ip_address,
        model=body.model,
        status=body.status,
        bridge_role=body.bridge_role,
    )
    return _view(await inventory.update_device(project_id, device_id, changes))


@router.put("/{project_id}/devices/{device_id}/alias", response_model=DeviceView)
async def rename_device(
    project_id: str,
    device_id: str,
    body: AliasUpdate,
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Псевдоним устройства."""
    return _view(await inventory.rename_device(project_id, device_id, body.name))


@router.delete("/{project_id}/devices/{device_id}", response_model=SuccessResponse)
async def remove_device(
    project_id: str,
    device_id: str,
    purge: bool = Query(False),
    inventory: DeviceInventoryService = Depends(get_inventory),
):
    """Скрывает устройство (purge=true — удаляет запись)."""
    await inventory.remove_device(project_id, device_id, purge=purge)
    return SuccessResponse()
