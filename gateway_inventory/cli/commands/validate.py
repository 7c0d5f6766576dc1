"""
Команда validate-config.

Проверка YAML конфигурации против схемы.
"""

import sys
import logging

from ...config import Config
from ...core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def cmd_validate_config(args, config=None, ctx=None) -> None:
    """
    Валидирует конфигурацию и печатает итог.

    Ошибки загрузки (файл, YAML, схема) — код выхода 1.
    """
    try:
        loaded = Config.load(args.config)
    except ConfigError as e:
        print(f"✗ {e}")
        sys.exit(1)

    print(f"✓ Config is valid ({loaded.source or 'defaults'})")
    print(f"  storage: {loaded.storage.backend} ({loaded.storage.data_dir})")
    print(f"  api: {loaded.api.host}:{loaded.api.port}")
    print(f"  sync deadline: {loaded.sync.deadline_seconds}s")
    print(f"  projects: {len(loaded.projects)}")
