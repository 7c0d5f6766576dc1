"""
Core модули Gateway Inventory.

- models: Device, DeviceMetadata, SnapshotRequest, SyncResult, схема (layout)
- exceptions: типизированные ошибки
- context: RunContext для отслеживания обработки снапшота
- logging: JSON/Human-readable логирование
- config_schema: pydantic схемы конфигурации
- domain: нормализация, роль моста, дерево топологии
"""

from .context import RunContext, get_current_context, set_current_context, use_context
from .exceptions import (
    GatewayInventoryError,
    ValidationError,
    NotFoundError,
    ConflictError,
    StoreError,
    ConfigError,
    format_error_for_log,
    failure_reason,
)
from .logging import (
    get_logger,
    setup_logging,
    setup_logging_from_config,
    StructuredLogger,
    JSONFormatter,
    HumanFormatter,
    OperationLog,
    LogConfig,
    RotationType,
)
from .models import (
    Device,
    DeviceMetadata,
    DeviceStatus,
    DeviceType,
    Project,
    RegisterPayload,
    RegisterContext,
    SnapshotDevice,
    SnapshotRequest,
    SyncFailure,
    SyncResult,
    CanvasElement,
    CanvasConnection,
    LayoutVersion,
)

__all__ = [
    "RunContext",
    "get_current_context",
    "set_current_context",
    "use_context",
    "GatewayInventoryError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StoreError",
    "ConfigError",
    "format_error_for_log",
    "failure_reason",
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "OperationLog",
    "LogConfig",
    "RotationType",
    "Device",
    "DeviceMetadata",
    "DeviceStatus",
    "DeviceType",
    "Project",
    "RegisterPayload",
    "RegisterContext",
    "SnapshotDevice",
    "SnapshotRequest",
    "SyncFailure",
    "SyncResult",
    "CanvasElement",
    "CanvasConnection",
    "LayoutVersion",
]
