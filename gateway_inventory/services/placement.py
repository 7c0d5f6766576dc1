"""
Проверка размещения устройств на схемах.

Устройство считается размещённым, если его id или MAC встречается
среди элементов текущей версии любой схемы проекта.
Используется пользовательскими правками и удалением; sync путь
обновляет устройства независимо от размещения.
"""

from typing import Optional, Set

from ..core.exceptions import ConflictError
from ..store.base import LayoutStore


class PlacementChecker:
    """Размещение по текущим версиям схем из LayoutStore."""

    def __init__(self, layouts: LayoutStore):
        self.layouts = layouts

    async def placed_keys(self, project_id: str) -> Set[str]:
        """
        Ключи размещённых устройств проекта.

        Returns:
            Set[str]: deviceId элементов и deviceMac в lower-case
        """
        keys: Set[str] = set()
        for version in await self.layouts.list_current_versions(project_id):
            for element in version.elements:
                if element.device_id:
                    keys.add(element.device_id)
                if element.device_mac:
                    keys.add(element.device_mac.lower())
        return keys

    async def is_placed(self, project_id: str, device_id: str, mac: Optional[str] = None) -> bool:
        keys = await self.placed_keys(project_id)
        if device_id in keys:
            return True
        return bool(mac) and mac.lower() in keys

    async def assert_unplaced(self, project_id: str, device_id: str, mac: Optional[str] = None) -> None:
        """
        Raises:
            ConflictError: устройство размещено на схеме
        """
        if await self.is_placed(project_id, device_id, mac):
            raise ConflictError(
                f"Device {device_id} is already placed in a layout",
                details={"device_id": device_id},
            )
