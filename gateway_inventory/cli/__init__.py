"""
CLI модуль gateway_inventory.

Структура:
- utils.py: общие утилиты (load_json_file, build_container)
- commands/: обработчики команд
  - serve.py: serve
  - sync.py: sync, push
  - topology.py: tree
  - export.py: export
  - maintenance.py: dedupe-switches, purge-without-mac
  - validate.py: validate-config

Примеры использования:
    python -m gateway_inventory serve --port 8080
    python -m gateway_inventory sync snapshot.json
    python -m gateway_inventory push snapshot.json --url http://localhost:8080
    python -m gateway_inventory export --project-id site-9 --format excel
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..core.config_schema import AppConfig
from ..core.context import RunContext, use_context
from ..core.exceptions import ConfigError
from ..core.logging import LogConfig, setup_logging_from_config
from ..exporters import EXPORT_FORMATS
from .commands import (
    cmd_dedupe_switches,
    cmd_export,
    cmd_purge_without_mac,
    cmd_push,
    cmd_serve,
    cmd_sync,
    cmd_tree,
    cmd_validate_config,
)
from .commands.sync import DEFAULT_PUSH_TIMEOUT

logger = logging.getLogger(__name__)

COMMANDS = {
    "serve": cmd_serve,
    "sync": cmd_sync,
    "push": cmd_push,
    "tree": cmd_tree,
    "export": cmd_export,
    "dedupe-switches": cmd_dedupe_switches,
    "purge-without-mac": cmd_purge_without_mac,
    "validate-config": cmd_validate_config,
}


def setup_parser() -> argparse.ArgumentParser:
    """
    Создаёт парсер аргументов командной строки.

    Returns:
        ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog="gateway_inventory",
        description="Инвентарь устройств по снапшотам шлюзов",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s serve --port 8080
  %(prog)s sync site9.json site12.json
  %(prog)s tree layout.json --format excel
  %(prog)s export --project-id site-9 --format csv
        """,
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Подробный вывод (DEBUG)")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Путь к файлу конфигурации YAML (default: config.yaml)",
    )
    parser.add_argument(
        "--storage",
        choices=["memory", "json"],
        default=None,
        help="Переопределить storage.backend",
    )

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    # === SERVE ===
    serve_parser = subparsers.add_parser("serve", help="Запуск HTTP API")
    serve_parser.add_argument("--host", default=None, help="Хост (default: api.host)")
    serve_parser.add_argument("--port", type=int, default=None, help="Порт (default: api.port)")

    # === SYNC ===
    sync_parser = subparsers.add_parser("sync", help="Сверка снапшотов с хранилищем")
    sync_parser.add_argument("files", nargs="+", help="JSON файлы снапшотов")

    # === PUSH ===
    push_parser = subparsers.add_parser("push", help="Отправить снапшот в API")
    push_parser.add_argument("file", help="JSON файл снапшота")
    push_parser.add_argument("--url", required=True, help="Адрес API, например http://localhost:8080")
    push_parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_PUSH_TIMEOUT,
        help=f"Таймаут запроса, сек (default: {DEFAULT_PUSH_TIMEOUT})",
    )

    # === TREE ===
    tree_parser = subparsers.add_parser("tree", help="Дерево топологии из схемы")
    tree_parser.add_argument("file", help="JSON с elements и connections")
    tree_parser.add_argument(
        "--format",
        "-f",
        choices=EXPORT_FORMATS,
        default=None,
        help="Экспорт узлов в файл (без флага — JSON в stdout)",
    )
    tree_parser.add_argument("--filename", default=None, help="Имя файла экспорта")

    # === EXPORT ===
    export_parser = subparsers.add_parser("export", help="Экспорт инвентаря проекта")
    export_parser.add_argument("--project-id", required=True, help="ID проекта")
    export_parser.add_argument(
        "--format",
        "-f",
        choices=EXPORT_FORMATS,
        default=None,
        help="Формат (default: output.default_format)",
    )
    export_parser.add_argument("--filename", default=None, help="Имя файла")
    export_parser.add_argument("--include-hidden", action="store_true", help="Включить скрытые")

    # === MAINTENANCE ===
    for name, help_text in (
        ("dedupe-switches", "Удалить дубли коммутаторов"),
        ("purge-without-mac", "Удалить устройства без MAC (кроме коммутаторов)"),
    ):
        maint_parser = subparsers.add_parser(name, help=help_text)
        maint_parser.add_argument("--project-id", default=None, help="Ограничить проектом")

    # === VALIDATE-CONFIG ===
    subparsers.add_parser("validate-config", help="Проверить конфигурацию")

    return parser


def _log_config(app: AppConfig, verbose: bool) -> LogConfig:
    """LogConfig из секции logging; -v важнее уровня из конфига."""
    data = app.logging.model_dump()
    if verbose:
        data["level"] = "DEBUG"
    return LogConfig.from_dict(data)


def main(argv: Optional[List[str]] = None) -> None:
    """Главная функция CLI."""
    from ..config import Config

    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "validate-config":
        cmd_validate_config(args)
        return

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        print(f"Ошибка конфигурации: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging_from_config(_log_config(config.app, args.verbose))

    with use_context(RunContext.create(triggered_by="cli", command=args.command)) as ctx:
        logger.info(f"Run started (command={args.command})")
        COMMANDS[args.command](args, config, ctx)
        logger.info(f"Run finished in {ctx.elapsed_human}")


__all__ = ["main", "setup_parser"]
