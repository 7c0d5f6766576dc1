"""Общие schemas для API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Ответ health check."""

    status: str = "ok"
    version: str
    uptime: float
    storage: str


class ErrorResponse(BaseModel):
    """Ответ с ошибкой."""

    success: bool = False
    error: str
    detail: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class SuccessResponse(BaseModel):
    """Простой ответ об успехе."""

    success: bool = True
