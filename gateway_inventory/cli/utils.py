"""
Утилиты CLI.

Общие функции для всех команд CLI.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from ..config import Config
from ..container import Container

logger = logging.getLogger(__name__)


def load_json_file(path: str) -> Any:
    """
    Читает JSON файл.

    Raises:
        SystemExit: Файл не найден или содержит ошибки
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.error(f"Файл не найден: {path}")
        sys.exit(1)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ошибка чтения {path}: {e}")
        sys.exit(1)


def build_container(config: Config, storage: Optional[str] = None) -> Container:
    """Собирает зависимости и создаёт проекты из конфигурации."""
    container = Container.from_config(config, backend=storage)
    asyncio.run(container.seed_projects())
    return container


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))
