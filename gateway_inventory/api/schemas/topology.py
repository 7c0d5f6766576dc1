"""Schemas для дерева топологии."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CanvasElementIn(BaseModel):
    """Элемент схемы."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    type: str = ""
    device_id: Optional[str] = Field(None, alias="deviceId")
    device_mac: Optional[str] = Field(None, alias="deviceMac")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CanvasConnectionIn(BaseModel):
    """Связь схемы."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    kind: str = Field("wired", pattern="^(wired|wireless)$")
    from_device_id: Optional[str] = Field(None, alias="fromDeviceId")
    to_device_id: Optional[str] = Field(None, alias="toDeviceId")
    bandwidth: Optional[Dict[str, float]] = None
    status: Optional[str] = None


class TreeRequest(BaseModel):
    """Элементы и связи для построения дерева."""

    elements: List[CanvasElementIn] = Field(default_factory=list)
    connections: List[CanvasConnectionIn] = Field(default_factory=list)
