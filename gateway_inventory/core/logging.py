"""
Structured Logging для Gateway Inventory.

Два формата: JSON (для ELK/Loki) и human-readable (для консоли).
Каждая запись получает run_id текущего RunContext, поэтому все
сообщения одной обработки снапшота легко собрать вместе.

Пример использования:
    from gateway_inventory.core.logging import setup_logging, get_logger

    setup_logging(json_format=False, level=logging.INFO)

    logger = get_logger(__name__)
    logger.info("Снапшот принят", project=9, gateway="00:11:22:33:44:55")

Формат вывода (JSON):
    {"timestamp": "2026-03-01T10:30:15.123456", "level": "INFO",
     "message": "Снапшот принят", "logger": "gateway_inventory.services.sync",
     "run_id": "3f9c1a2b", "project": 9, "gateway": "00:11:22:33:44:55"}
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .context import RunContextFilter, get_current_context


class RotationType(str, Enum):
    """Тип ротации логов."""
    SIZE = "size"
    TIME = "time"
    NONE = "none"


@dataclass
class LogConfig:
    """
    Конфигурация логирования.

    Attributes:
        level: Уровень логирования
        json_format: JSON для файла (консоль всегда human-readable)
        console: Выводить в консоль
        file_path: Путь к файлу логов (None = без файла)
        rotation: Тип ротации (size, time, none)
        max_bytes: Макс размер файла для size-ротации
        backup_count: Количество backup файлов
        when: Интервал для time-ротации (S, M, H, D, midnight)
        interval: Частота ротации для time
    """
    level: int = logging.INFO
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: RotationType = RotationType.SIZE
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    when: str = "midnight"
    interval: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Создаёт конфигурацию из словаря (секция logging конфига)."""
        level = data.get("level", "INFO")
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        return cls(
            level=level,
            json_format=data.get("json_format", False),
            console=data.get("console", True),
            file_path=data.get("file_path"),
            rotation=RotationType(data.get("rotation", "size")),
            max_bytes=data.get("max_bytes", 10 * 1024 * 1024),
            backup_count=data.get("backup_count", 5),
            when=data.get("when", "midnight"),
            interval=data.get("interval", 1),
        )


class JSONFormatter(logging.Formatter):
    """
    JSON форматтер.

    Стандартные поля: timestamp, level, message, logger, run_id.
    Любые extra поля (project, gateway, device, operation, ...) выводятся как есть.
    """

    RESERVED_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text",
        "filename", "funcName", "levelname", "levelno", "lineno",
        "module", "msecs", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread",
        "threadName", "taskName", "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key in self.RESERVED_ATTRS or key.startswith("_"):
                continue
            if key == "run_id" and value == "-":
                continue
            log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable форматтер.

    Формат: TIMESTAMP - LEVEL - [run_id] MESSAGE (project=9, gateway=...)
    """

    EXTRA_FIELDS = ("project", "gateway", "device", "operation")

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        run_id = getattr(record, "run_id", None)
        prefix = f"[{run_id}] " if run_id and run_id != "-" else ""

        extras = []
        for attr in self.EXTRA_FIELDS:
            value = getattr(record, attr, None)
            if value is not None and value != "":
                extras.append(f"{attr}={value}")
        extra_str = f" ({', '.join(extras)})" if extras else ""

        result = f"{timestamp} - {level} - {prefix}{message}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


class StructuredLogger:
    """
    Обёртка над logging.Logger с именованными полями.

        logger.info("Устройство переведено в offline", project=pid, device=mac)
    """

    def __init__(self, name: str, default_extra: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._default_extra = default_extra or {}

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {**self._default_extra, **kwargs}
        if "run_id" not in extra:
            ctx = get_current_context()
            if ctx:
                extra["run_id"] = ctx.run_id
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log ERROR с traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """
        Новый логгер с дополнительными полями по умолчанию.

        Example:
            log = logger.bind(project=project.id, gateway=gateway_mac)
            log.info("Sweep завершён")
        """
        return StructuredLogger(self._logger.name, default_extra={**self._default_extra, **kwargs})

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """
    Получает или создаёт StructuredLogger.

    Args:
        name: Имя логгера (обычно __name__)

    Returns:
        StructuredLogger: Логгер
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def _reset_root_handlers() -> logging.Logger:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    return root_logger


def setup_logging(
    json_format: bool = False,
    level: int = logging.INFO,
    stream: Any = None,
) -> None:
    """
    Настройка логирования в поток.

    Args:
        json_format: True для JSON, False для human-readable
        level: Уровень логирования
        stream: Поток вывода (по умолчанию sys.stderr)

    Example:
        setup_logging(json_format=args.json_logs)
    """
    root_logger = _reset_root_handlers()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    handler.addFilter(RunContextFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _create_file_handler(config: LogConfig) -> logging.Handler:
    """Создаёт file handler с ротацией согласно LogConfig."""
    log_path = Path(config.file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if config.rotation == RotationType.SIZE:
        return logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    if config.rotation == RotationType.TIME:
        return logging.handlers.TimedRotatingFileHandler(
            filename=str(log_path),
            when=config.when,
            interval=config.interval,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(str(log_path), encoding="utf-8")


def setup_logging_from_config(config: LogConfig) -> None:
    """
    Настраивает логирование из конфигурации.

    Консоль всегда human-readable, файл в формате json_format.

    Args:
        config: LogConfig с настройками
    """
    root_logger = _reset_root_handlers()
    handlers: List[logging.Handler] = []

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(HumanFormatter())
        handlers.append(console_handler)

    if config.file_path:
        file_handler = _create_file_handler(config)
        file_handler.setFormatter(JSONFormatter() if config.json_format else HumanFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(config.level)
        handler.addFilter(RunContextFilter())
        root_logger.addHandler(handler)

    root_logger.setLevel(config.level)


@dataclass
class OperationLog:
    """
    Лог операции с timing и результатом.

    Использование:
        op = OperationLog(operation="device-sync", project=project.id).start()
        ...
        op.success(processed=10, failed=1).log()
    """
    operation: str
    project: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: str = "pending"
    result: Dict[str, Any] = field(default_factory=dict)
    error: str = ""

    def start(self) -> "OperationLog":
        self.started_at = datetime.now()
        self.status = "running"
        return self

    def success(self, **result: Any) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "success"
        self.result = result
        return self

    def failure(self, error: str) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "failure"
        self.error = error
        return self

    @property
    def duration_ms(self) -> Optional[float]:
        """Длительность в миллисекундах."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds() * 1000
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"operation": self.operation, "status": self.status}
        if self.project:
            data["project"] = self.project
        if self.duration_ms is not None:
            data["duration_ms"] = round(self.duration_ms, 2)
        if self.result:
            data["result"] = self.result
        if self.error:
            data["error"] = self.error
        return data

    def log(self, logger: Optional[StructuredLogger] = None) -> None:
        """Пишет итог операции в лог (INFO при успехе, ERROR при ошибке)."""
        logger = logger or get_logger("gateway_inventory")
        level = logging.INFO if self.status == "success" else logging.ERROR
        extra: Dict[str, Any] = {"operation": self.operation}
        if self.project:
            extra["project"] = self.project
        if self.duration_ms is not None:
            extra["duration_ms"] = round(self.duration_ms, 2)
        extra.update(self.result)
        if self.error:
            extra["error"] = self.error
        logger._log(level, f"Operation {self.operation} {self.status}", **extra)
