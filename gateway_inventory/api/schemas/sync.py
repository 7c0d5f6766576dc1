"""
Schemas для POST /device-sync.

Формат провода (camelCase) сохраняется для совместимости с прошивками шлюзов.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...core.constants import MAX_STATUSES_PER_DEVICE


class DeviceSyncItem(BaseModel):
    """Запись устройства в снапшоте."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    mac: str
    type: str
    name: Optional[str] = None
    model: Optional[str] = None
    ip: Optional[str] = None
    statuses: Optional[List[str]] = Field(None, max_length=MAX_STATUSES_PER_DEVICE)
    latency_ms: Optional[float] = Field(None, alias="latencyMs")
    packet_loss: Optional[float] = Field(None, alias="packetLoss")
    metrics: Optional[Dict[str, Any]] = None
    bridge_role: Optional[str] = Field(None, alias="bridgeRole")
    mode: Optional[str] = None
    role: Optional[str] = None


class DeviceSyncRequest(BaseModel):
    """Снапшот шлюза."""

    model_config = ConfigDict(populate_by_name=True)

    project_code: int = Field(..., alias="projectCode", ge=0, le=255)
    gateway_mac: str = Field(..., alias="gatewayMac")
    gateway_ip: Optional[str] = Field(None, alias="gatewayIp")
    scanned_at: Optional[str] = Field(None, alias="scannedAt")
    devices: List[DeviceSyncItem] = Field(default_factory=list)


class DeviceSyncFailure(BaseModel):
    """Отказ по одной записи."""

    mac: Optional[str] = None
    reason: str


class DeviceSyncResponse(BaseModel):
    """Результат сверки."""

    processed: int
    failed: List[DeviceSyncFailure] = []
