"""
Pydantic схемы для валидации конфигурации Gateway Inventory.

Валидация происходит при загрузке конфигурации.
Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from gateway_inventory.core.config_schema import validate_config

    config_dict = yaml.safe_load(open("config.yaml"))
    validated = validate_config(config_dict)  # raises ConfigError on failure
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator
from pydantic_core import PydanticCustomError

from .constants import (
    DEFAULT_SYNC_DEADLINE_SECONDS,
    MAX_STATUSES_PER_DEVICE,
    TREE_HORIZONTAL_SPACING,
    TREE_ROOT_MARKER,
    TREE_VERTICAL_SPACING,
)
from .exceptions import ConfigError


class ApiConfig(BaseModel):
    """Настройки HTTP API."""
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class StorageConfig(BaseModel):
    """Настройки хранилища."""
    backend: str = Field(default="json", pattern="^(memory|json)$")
    data_dir: str = "data"
    activity_log_limit: int = Field(default=1000, ge=10, le=100000)


class SyncConfig(BaseModel):
    """Настройки сверки снапшотов."""
    deadline_seconds: float = Field(default=DEFAULT_SYNC_DEADLINE_SECONDS, gt=0, le=600)
    max_statuses: int = Field(default=MAX_STATUSES_PER_DEVICE, ge=1, le=100)


class TopologyConfig(BaseModel):
    """Параметры раскладки дерева топологии."""
    horizontal_spacing: int = Field(default=TREE_HORIZONTAL_SPACING, ge=10)
    vertical_spacing: int = Field(default=TREE_VERTICAL_SPACING, ge=10)
    root_marker: str = TREE_ROOT_MARKER

    @field_validator("root_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        """Маркер корневого коммутатора не может быть пустым."""
        if not v.strip():
            raise PydanticCustomError("empty_marker", "root_marker не может быть пустым")
        return v.strip().lower()


class OutputConfig(BaseModel):
    """Настройки экспорта."""
    output_folder: str = "reports"
    default_format: str = Field(default="excel", pattern="^(excel|csv|json)$")
    csv_delimiter: str = ","
    csv_encoding: str = "utf-8"
    excel_autofilter: bool = True
    excel_freeze_header: bool = True


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class ProjectSeed(BaseModel):
    """Проект, создаваемый при старте если его ещё нет в хранилище."""
    id: str
    code: int = Field(ge=0, le=255)
    name: str = ""
    status: str = Field(default="active", pattern="^(active|archived|deleted)$")


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    topology: TopologyConfig = Field(default_factory=TopologyConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    projects: List[ProjectSeed] = Field(default_factory=list)
    debug: bool = False


def validate_config(config_dict: dict, config_file: str = "config.yaml") -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML
        config_file: Имя файла для сообщения об ошибке

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except PydanticValidationError as e:
        error_msg = str(e)
        errors = e.errors()
        key = None
        if errors:
            first_error = errors[0]
            key = ".".join(str(x) for x in first_error.get("loc", []))
            error_msg = f"{key}: {first_error.get('msg', 'Unknown error')}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file,
            key=key,
        ) from e