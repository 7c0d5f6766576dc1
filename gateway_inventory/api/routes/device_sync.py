"""
Device Sync route — приём снапшотов от шлюзов.

POST /device-sync
    → {processed, failed: [{mac?, reason}]}

Некорректный MAC шлюза — 400. Проект не найден — обычный ответ
со всеми записями в failed.
"""

import logging

from fastapi import APIRouter, Depends

from ...core.context import RunContext, use_context
from ...core.models import SnapshotRequest
from ...services.sync import DeviceSyncService
from ..dependencies import get_sync_service
from ..schemas import DeviceSyncRequest, DeviceSyncResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=DeviceSyncResponse,
    response_model_exclude_none=True,
    summary="Принять снапшот шлюза",
)
async def device_sync(
    body: DeviceSyncRequest,
    service: DeviceSyncService = Depends(get_sync_service),
):
    """Сверка снапшота с инвентарём проекта."""
    request = SnapshotRequest.from_dict(body.model_dump(by_alias=True))
    with use_context(RunContext.create(triggered_by="api", command="device-sync")):
        result = await service.process_snapshot(request)
    return result.to_dict()
