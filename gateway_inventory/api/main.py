"""
Gateway Inventory Web API.

FastAPI backend: приём снапшотов от шлюзов, устройства проекта,
дерево топологии, live-обновления.

Запуск:
    python -m gateway_inventory serve
    # или
    uvicorn gateway_inventory.api.main:app --host 0.0.0.0 --port 8080

Документация:
    http://localhost:8080/docs (Swagger UI)
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Config, load_config
from ..container import Container
from ..core.exceptions import (
    ConflictError,
    GatewayInventoryError,
    NotFoundError,
    ValidationError,
    format_error_for_log,
)
from .routes import device_sync_router, devices_router, realtime_router, topology_router
from .schemas import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, 400, "Bad Request"),
    (NotFoundError, 404, "Not Found"),
    (ConflictError, 409, "Conflict"),
)


def _error_response(status_code: int, error: str, detail: Optional[str] = None, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, details=details or None).model_dump(),
    )


def create_app(container: Optional[Container] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Создаёт FastAPI приложение.

    Args:
        container: Готовые зависимости (тесты передают in-memory)
        config: Конфигурация (если container не передан)

    Returns:
        FastAPI
    """
    started_at = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Gateway Inventory API v{__version__} starting...")
        await app.state.container.seed_projects()
        yield
        logger.info("Gateway Inventory API shutting down...")

    app = FastAPI(
        title="Gateway Inventory API",
        description="""
## Gateway Inventory Web API

- **Device Sync** - приём снапшотов сетевого обнаружения от шлюзов
- **Devices** - устройства проекта (регистрация, правка, псевдонимы, удаление)
- **Topology** - дерево топологии от OFC коммутаторов
- **Realtime** - live-обновления устройств по websocket
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container or Container.from_config(config or load_config())

    cors_origins = app.state.container.config.api.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception handlers
    # =========================================================================

    @app.exception_handler(GatewayInventoryError)
    async def domain_exception_handler(request: Request, exc: GatewayInventoryError):
        for error_class, status_code, title in ERROR_STATUS:
            if isinstance(exc, error_class):
                return _error_response(status_code, title, exc.message, exc.details)
        logger.error(f"Ошибка при обработке {request.url.path}: {format_error_for_log(exc)}")
        return _error_response(500, "Internal Server Error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "invalid request"
        if errors:
            first = errors[0]
            loc = ".".join(str(x) for x in first.get("loc", []))
            detail = f"{loc}: {first.get('msg', 'invalid value')}"
        return _error_response(400, "Bad Request", detail)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Глобальный обработчик ошибок."""
        logger.exception(f"Необработанная ошибка при обработке {request.url.path}")
        return _error_response(500, "Internal Server Error", "unknown error")

    # =========================================================================
    # Health check
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["Health"], summary="Health check")
    async def health_check():
        """Проверка состояния API."""
        return HealthResponse(
            status="ok",
            version=__version__,
            uptime=time.time() - started_at,
            storage=app.state.container.config.storage.backend,
        )

    @app.get("/", tags=["Health"])
    async def root():
        """Корневой endpoint."""
        return {
            "name": "Gateway Inventory API",
            "version": __version__,
            "docs": "/docs",
        }

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(device_sync_router, prefix="/device-sync", tags=["Device Sync"])
    app.include_router(devices_router, prefix="/api/projects", tags=["Devices"])
    app.include_router(topology_router, prefix="/api", tags=["Topology"])
    app.include_router(realtime_router, tags=["Realtime"])

    return app


def get_app() -> FastAPI:
    """Фабрика для uvicorn --factory."""
    return create_app()
