"""Schemas для /api/projects/{project_id}/devices."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeviceRegister(BaseModel):
    """Ручная регистрация (merge-or-create)."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    type: str = Field(..., max_length=60)
    name: Optional[str] = Field(None, max_length=120)
    model: Optional[str] = Field(None, max_length=80)
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    mac_address: Optional[str] = Field(None, alias="macAddress")
    status: Optional[str] = None


class SwitchCreate(BaseModel):
    """Регистрация коммутатора по имени."""

    name: str = Field(..., max_length=120)


class DeviceUpdate(BaseModel):
    """Пользовательская правка устройства."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    name: Optional[str] = Field(None, max_length=120)
    type: Optional[str] = Field(None, max_length=60)
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    model: Optional[str] = Field(None, max_length=80)
    status: Optional[str] = None
    bridge_role: Optional[str] = Field(None, alias="bridgeRole")


class AliasUpdate(BaseModel):
    """Псевдоним устройства (пустая строка очищает)."""

    name: str = Field("", max_length=120)


class DeviceView(BaseModel):
    """Представление устройства."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: str
    name: str
    alias: Optional[str] = None
    type: str
    ip: Optional[str] = None
    mac: Optional[str] = None
    status: str
    model: Optional[str] = None
    bridge_role: Optional[str] = Field(None, alias="bridgeRole")
    last_seen_at: Optional[str] = Field(None, alias="lastSeenAt")
