"""
Типизированные исключения для Gateway Inventory.

Иерархия:
    GatewayInventoryError (базовый)
    ├── ValidationError (некорректные входные данные)
    ├── NotFoundError (сущность не найдена)
    ├── ConflictError (нарушение бизнес-правила / уникальности)
    ├── StoreError (ошибка хранилища)
    └── ConfigError (конфигурация)

Пример использования:
    from gateway_inventory.core.exceptions import ConflictError, failure_reason

    try:
        await inventory.remove_device(project_id, device_id)
    except ConflictError as e:
        logger.warning(f"Устройство размещено на схеме: {e.message}")
"""

from typing import Any, Optional

from .constants import REASON_UNKNOWN


class GatewayInventoryError(Exception):
    """
    Базовое исключение для всех ошибок Gateway Inventory.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(GatewayInventoryError):
    """
    Ошибка валидации входных данных.

    Attributes:
        field: Поле с ошибкой
        value: Значение которое не прошло валидацию

    Пример:
        raise ValidationError("gateway mac invalid", field="gatewayMac", value="xx")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[dict] = None,
    ):
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Ограничиваем размер
        super().__init__(message, details)


class NotFoundError(GatewayInventoryError):
    """
    Сущность не найдена.

    Пример:
        raise NotFoundError("Device d-1 not found", entity="device", key="d-1")
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.entity = entity
        self.key = key
        details = details or {}
        if entity:
            details["entity"] = entity
        if key:
            details["key"] = key
        super().__init__(message, details)


class ConflictError(GatewayInventoryError):
    """
    Конфликт с текущим состоянием (размещённое устройство, дубликат MAC/имени).

    Пример:
        raise ConflictError("Device d-1 is already placed in a layout")
    """
    pass


class StoreError(GatewayInventoryError):
    """Ошибка чтения/записи хранилища."""
    pass


class ConfigError(GatewayInventoryError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Missing required field", config_file="config.yaml", key="storage.data_dir")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, GatewayInventoryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def failure_reason(error: BaseException) -> str:
    """
    Причина отказа для ответа шлюзу.

    Доменные ошибки отдают своё сообщение, прочие исключения
    (внутренние сбои) не раскрываются: "unknown error".

    Args:
        error: Исключение

    Returns:
        str: Человекочитаемая причина
    """
    if isinstance(error, GatewayInventoryError) and error.message:
        return error.message
    return REASON_UNKNOWN
