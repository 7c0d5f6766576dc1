"""
Журнал активности.

Записи {project_id, user_id?, action, details} для device.sync,
device.create, device.update, device.model_changed, device.delete.
Запись журнала — побочный эффект: ошибка хранилища логируется
и никогда не откатывает основную операцию.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import format_error_for_log
from ..core.models import ActivityLogEntry
from ..store.base import ActivityLogStore

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Fire-and-forget журнал поверх ActivityLogStore."""

    def __init__(self, store: ActivityLogStore):
        self.store = store

    async def record(
        self,
        project_id: str,
        action: str,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> Optional[ActivityLogEntry]:
        """
        Пишет запись в журнал.

        Returns:
            ActivityLogEntry или None если запись не удалась
        """
        entry = ActivityLogEntry(
            project_id=project_id,
            action=action,
            details=dict(details or {}),
            user_id=user_id,
        )
        try:
            return await self.store.append(entry)
        except Exception as e:
            logger.warning(f"Не удалось записать {action} в журнал: {format_error_for_log(e)}")
            return None

    async def list_entries(self, project_id: Optional[str] = None, limit: int = 100) -> List[ActivityLogEntry]:
        """Последние записи журнала (новые первыми)."""
        return await self.store.list(project_id=project_id, limit=limit)
