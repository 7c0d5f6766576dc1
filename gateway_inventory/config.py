"""
Загрузчик конфигурации Gateway Inventory.

Порядок слоёв (каждый следующий перекрывает предыдущий):
    1. Значения по умолчанию (core/config_schema.py)
    2. YAML файл: --config, либо config.yaml / gateway_inventory.yaml в текущей папке
    3. Переменные окружения:
        GATEWAY_INVENTORY_DATA_DIR   -> storage.data_dir
        GATEWAY_INVENTORY_STORAGE    -> storage.backend (memory | json)
        GATEWAY_INVENTORY_LOG_LEVEL  -> logging.level

Доступ к настройкам через точку:
    config.storage.data_dir
    config.sync.deadline_seconds
    config.topology.root_marker
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .core.config_schema import AppConfig, validate_config
from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

SEARCH_PATHS = ("config.yaml", "config.yml", "gateway_inventory.yaml")

ENV_OVERRIDES = {
    "GATEWAY_INVENTORY_DATA_DIR": ("storage", "data_dir"),
    "GATEWAY_INVENTORY_STORAGE": ("storage", "backend"),
    "GATEWAY_INVENTORY_LOG_LEVEL": ("logging", "level"),
}


def _merge_dict(base: dict, override: dict) -> None:
    """Рекурсивно мержит словари."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value


class Config:
    """
    Главный класс конфигурации.

    Пример:
        config = Config.load("config.yaml")
        config.storage.backend    # "json"
        config.api.port           # 8080
    """

    def __init__(self, app: Optional[AppConfig] = None, source: Optional[str] = None):
        self._app = app or AppConfig()
        self.source = source

    @property
    def app(self) -> AppConfig:
        return self._app

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._app, name)

    @staticmethod
    def find_config_file(config_file: Optional[str] = None) -> Optional[str]:
        """Путь к YAML файлу: явный или первый найденный из SEARCH_PATHS."""
        if config_file:
            if not os.path.exists(config_file):
                raise ConfigError(f"Config file not found: {config_file}", config_file=config_file)
            return config_file
        for path in SEARCH_PATHS:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def _read_yaml(config_file: str) -> Dict[str, Any]:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", config_file=config_file) from e
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping", config_file=config_file)
        return data

    @staticmethod
    def _env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                if key == "level":
                    value = value.upper()
                overrides.setdefault(section, {})[key] = value
        return overrides

    @classmethod
    def load(
        cls,
        config_file: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "Config":
        """
        Загружает конфигурацию.

        Args:
            config_file: Путь к YAML (опционально)
            environ: Окружение (по умолчанию os.environ)

        Returns:
            Config: Валидированная конфигурация

        Raises:
            ConfigError: Файл не найден, битый YAML или ошибка валидации
        """
        data: Dict[str, Any] = AppConfig().model_dump()
        path = cls.find_config_file(config_file)
        if path:
            _merge_dict(data, cls._read_yaml(path))
            logger.debug(f"Конфигурация загружена из {path}")
        _merge_dict(data, cls._env_overrides(environ))

        app = validate_config(data, config_file=path or "<defaults>")
        return cls(app, source=path)


def load_config(config_file: Optional[str] = None) -> Config:
    """
    Загружает конфигурацию из файла и окружения.

    Args:
        config_file: Путь к YAML файлу (опционально)

    Returns:
        Config: Объект конфигурации
    """
    return Config.load(config_file)
