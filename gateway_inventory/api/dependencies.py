"""
FastAPI зависимости.

Container кладётся в app.state при создании приложения;
роуты получают сервисы через Depends.
"""

from fastapi import Request

from ..container import Container
from ..services.inventory import DeviceInventoryService
from ..services.sync import DeviceSyncService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_inventory(request: Request) -> DeviceInventoryService:
    return get_container(request).inventory


def get_sync_service(request: Request) -> DeviceSyncService:
    return get_container(request).sync
