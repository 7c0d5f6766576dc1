"""Pydantic schemas для API."""

from .common import ErrorResponse, HealthResponse, SuccessResponse
from .devices import AliasUpdate, DeviceRegister, DeviceUpdate, DeviceView, SwitchCreate
from .sync import DeviceSyncFailure, DeviceSyncItem, DeviceSyncRequest, DeviceSyncResponse
from .topology import CanvasConnectionIn, CanvasElementIn, TreeRequest

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    "AliasUpdate",
    "DeviceRegister",
    "DeviceUpdate",
    "DeviceView",
    "SwitchCreate",
    "DeviceSyncFailure",
    "DeviceSyncItem",
    "DeviceSyncRequest",
    "DeviceSyncResponse",
    "CanvasConnectionIn",
    "CanvasElementIn",
    "TreeRequest",
]
