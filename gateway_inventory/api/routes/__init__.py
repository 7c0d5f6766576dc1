"""API routes."""

from .device_sync import router as device_sync_router
from .devices import router as devices_router
from .topology import router as topology_router
from .realtime import router as realtime_router

__all__ = [
    "device_sync_router",
    "devices_router",
    "topology_router",
    "realtime_router",
]
