"""Fixtures для API тестов.

Приложение собирается с in-memory хранилищем; проект с кодом 9
создаётся при старте (lifespan).

Требует: pip install fastapi httpx
"""

import pytest

# Skip all API tests if fastapi not installed
pytest.importorskip("fastapi", reason="fastapi not installed, skipping API tests")

from fastapi.testclient import TestClient

from gateway_inventory.api.main import create_app
from gateway_inventory.container import Container


@pytest.fixture
def api_container(app_config):
    """Зависимости приложения (доступны тестам напрямую)."""
    return Container.from_config(app_config)


@pytest.fixture
def client(api_container):
    """TestClient для API."""
    with TestClient(create_app(container=api_container)) as client:
        yield client


@pytest.fixture
def register(client):
    """Регистрирует устройство через API и возвращает его представление."""
    def _register(**body):
        response = client.post("/api/projects/site-9/devices/register", json=body)
        assert response.status_code == 200, response.text
        return response.json()
    return _register
