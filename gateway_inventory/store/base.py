"""
Интерфейсы хранилищ (Repository pattern).

Сервисы работают только с этими абстракциями, поэтому хранилище
легко переключается между памятью (тесты) и JSON файлами (по умолчанию).
Все методы асинхронные: обращения к хранилищу — точки переключения
event loop.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..core.models import ActivityLogEntry, Device, LayoutVersion, Project


class DeviceStore(ABC):
    """
    Хранилище канонических устройств.

    Инвариант: в пределах проекта не более одного устройства
    с данным непустым mac_address (save бросает ConflictError).
    Методы возвращают копии: изменение объекта без save не влияет на хранилище.
    """

    @abstractmethod
    async def get(self, project_id: str, device_id: str) -> Optional[Device]:
        """Устройство проекта по ID."""

    @abstractmethod
    async def find_by_mac(self, project_id: str, mac: str) -> Optional[Device]:
        """Устройство по MAC (сравнение без учёта регистра)."""

    @abstractmethod
    async def find_by_ip(self, project_id: str, ip: str) -> Optional[Device]:
        """Первое устройство проекта с точно таким IP."""

    @abstractmethod
    async def find_by_type_and_name(self, project_id: str, device_type: str, name: str) -> Optional[Device]:
        """Устройство по типу и имени (имя с учётом регистра)."""

    @abstractmethod
    async def list_by_project(self, project_id: str) -> List[Device]:
        """Все устройства проекта в порядке создания."""

    @abstractmethod
    async def list_all(self) -> List[Device]:
        """Все устройства всех проектов."""

    @abstractmethod
    async def save(self, device: Device) -> Device:
        """
        Создаёт или обновляет запись.

        При первом сохранении назначает id и created_at,
        при каждом сохранении обновляет updated_at.

        Raises:
            ConflictError: MAC уже занят другим устройством проекта
        """

    @abstractmethod
    async def delete(self, device_ids: Iterable[str]) -> int:
        """Удаляет устройства, возвращает количество удалённых."""


class ProjectStore(ABC):
    """Хранилище проектов."""

    @abstractmethod
    async def get(self, project_id: str) -> Optional[Project]:
        """Проект по ID."""

    @abstractmethod
    async def find_active_by_code(self, code: int) -> Optional[Project]:
        """Активный проект по короткому коду (0-255)."""

    @abstractmethod
    async def list_all(self) -> List[Project]:
        """Все проекты."""

    @abstractmethod
    async def save(self, project: Project) -> Project:
        """Создаёт или обновляет проект."""


class LayoutStore(ABC):
    """Хранилище текущих версий схем."""

    @abstractmethod
    async def list_current_versions(self, project_id: str) -> List[LayoutVersion]:
        """Текущие версии всех схем проекта."""

    @abstractmethod
    async def get_current_version(self, project_id: str, layout_id: str) -> Optional[LayoutVersion]:
        """Текущая версия конкретной схемы."""

    @abstractmethod
    async def save_version(self, version: LayoutVersion) -> LayoutVersion:
        """Сохраняет версию как текущую для своей схемы."""


class ActivityLogStore(ABC):
    """Хранилище журнала активности."""

    @abstractmethod
    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Добавляет запись (назначает id и created_at)."""

    @abstractmethod
    async def list(self, project_id: Optional[str] = None, limit: int = 100) -> List[ActivityLogEntry]:
        """Последние записи (новые первыми)."""
