"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- app_config: Конфигурация с in-memory хранилищем и проектом с кодом 9
- container: Собранные зависимости (проект уже создан)
- snapshot_body: Снапшот шлюза в формате POST /device-sync
"""

from typing import Any, Dict

import pytest

from gateway_inventory.config import Config
from gateway_inventory.container import Container
from gateway_inventory.core.config_schema import AppConfig, ProjectSeed, StorageConfig

PROJECT_ID = "site-9"
PROJECT_CODE = 9
GATEWAY_MAC = "00-11-22-33-44-55"


@pytest.fixture
def app_config(tmp_path) -> Config:
    """Конфигурация: memory storage, один активный проект."""
    return Config(AppConfig(
        storage=StorageConfig(backend="memory", data_dir=str(tmp_path / "data")),
        projects=[ProjectSeed(id=PROJECT_ID, code=PROJECT_CODE, name="Tower crane site")],
    ))


@pytest.fixture
async def container(app_config) -> Container:
    """Container с созданным проектом."""
    container = Container.from_config(app_config)
    await container.seed_projects()
    return container


@pytest.fixture
def snapshot_body() -> Dict[str, Any]:
    """Снапшот с камерой (имя на китайском, дополнительный статус)."""
    return {
        "projectCode": PROJECT_CODE,
        "gatewayMac": GATEWAY_MAC,
        "gatewayIp": "192.168.1.1",
        "scannedAt": "2024-05-01T10:00:00Z",
        "devices": [
            {
                "mac": "00-11-22-33-44-66",
                "type": "camera",
                "name": "塔吊摄像机",
                "statuses": ["online", "signal-weak"],
            },
        ],
    }


# Маркеры для группировки тестов
def pytest_configure(config):
    """Регистрация custom markers для pytest."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (быстрые, без внешних зависимостей)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (несколько сервисов вместе)"
    )
    config.addinivalue_line(
        "markers", "api: HTTP API tests (TestClient)"
    )
    config.addinivalue_line(
        "markers", "slow: Медленные тесты"
    )
