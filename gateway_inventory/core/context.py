"""
Контекст выполнения для отслеживания обработки снапшотов.

RunContext живёт в contextvar, поэтому параллельные снапшоты
разных проектов (разные asyncio-задачи) не видят контекст друг друга.

Предоставляет:
- run_id: уникальный идентификатор запуска
- started_at: время начала
- triggered_by: источник запуска (api/cli/test)
- command: операция (device-sync, sync, dedupe-switches, ...)

Пример использования:
    ctx = RunContext.create(triggered_by="api", command="device-sync")
    with use_context(ctx):
        result = await sync_service.process_snapshot(request)
    # Все логи внутри блока содержат run_id
"""

import contextvars
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Literal, Optional

logger = logging.getLogger(__name__)

TriggerSource = Literal["cli", "api", "test"]


@dataclass
class RunContext:
    """
    Контекст выполнения операции.

    Attributes:
        run_id: Уникальный идентификатор запуска
        started_at: Время начала выполнения
        triggered_by: Источник запуска (cli/api/test)
        command: Операция
        extra: Дополнительные данные контекста (project_id, gateway_mac, ...)
    """

    run_id: str
    started_at: datetime
    triggered_by: TriggerSource = "api"
    command: str = ""
    extra: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        triggered_by: TriggerSource = "api",
        command: str = "",
        **extra,
    ) -> "RunContext":
        """
        Создаёт новый контекст выполнения.

        Args:
            triggered_by: Источник запуска
            command: Название операции
            **extra: Дополнительные поля контекста

        Returns:
            RunContext: Новый контекст
        """
        ctx = cls(
            run_id=uuid.uuid4().hex[:8],
            started_at=datetime.now(),
            triggered_by=triggered_by,
            command=command,
            extra=dict(extra),
        )
        logger.debug(f"Created RunContext: {ctx.run_id} ({command})")
        return ctx

    @property
    def elapsed_seconds(self) -> float:
        """Время выполнения в секундах."""
        return (datetime.now() - self.started_at).total_seconds()

    @property
    def elapsed_human(self) -> str:
        """Время выполнения в человекочитаемом формате."""
        elapsed = self.elapsed_seconds
        if elapsed < 1:
            return f"{elapsed * 1000:.0f}ms"
        if elapsed < 60:
            return f"{elapsed:.1f}s"
        minutes = int(elapsed // 60)
        seconds = int(elapsed % 60)
        return f"{minutes}m {seconds}s"

    def log_prefix(self) -> str:
        """Префикс для логов вида "[run_id][command]"."""
        if self.command:
            return f"[{self.run_id}][{self.command}]"
        return f"[{self.run_id}]"

    def to_dict(self) -> dict:
        """Сериализует контекст в словарь для JSON/отчётов."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "triggered_by": self.triggered_by,
            "command": self.command,
            "elapsed_seconds": self.elapsed_seconds,
            "extra": self.extra,
        }

    def __str__(self) -> str:
        return f"RunContext({self.run_id})"


_current_context: contextvars.ContextVar[Optional[RunContext]] = contextvars.ContextVar(
    "gateway_inventory_run_context", default=None
)


def get_current_context() -> Optional[RunContext]:
    """Возвращает контекст текущей задачи."""
    return _current_context.get()


def set_current_context(ctx: Optional[RunContext]) -> contextvars.Token:
    """Устанавливает контекст текущей задачи."""
    return _current_context.set(ctx)


@contextmanager
def use_context(ctx: RunContext) -> Iterator[RunContext]:
    """
    Устанавливает контекст на время блока.

    Пример:
        with use_context(RunContext.create(command="sync")) as ctx:
            logger.info(f"{ctx.log_prefix()} старт")
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


class RunContextFilter(logging.Filter):
    """
    Logging filter: добавляет run_id из текущего контекста в каждую запись.

    Если контекста нет, run_id = "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_current_context()
        record.run_id = ctx.run_id if ctx else "-"
        return True
