"""
Команды sync и push.

sync — локальная сверка снапшотов с хранилищем.
push — отправка снапшота в запущенный API (эмуляция шлюза).
"""

import asyncio
import logging
import sys

from ...core.models import SnapshotRequest
from ..utils import build_container, load_json_file, print_json

logger = logging.getLogger(__name__)

DEFAULT_PUSH_TIMEOUT = 30


def _load_request(path: str) -> SnapshotRequest:
    data = load_json_file(path)
    try:
        return SnapshotRequest.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Некорректный снапшот {path}: {e}")
        sys.exit(1)


def cmd_sync(args, config, ctx=None) -> None:
    """
    Обработчик команды sync.

    Несколько файлов обрабатываются конкурентно: разные проекты
    параллельно, один проект по очереди.
    """
    requests_ = [_load_request(path) for path in args.files]
    container = build_container(config, args.storage)

    results = asyncio.run(container.sync.process_many(requests_))

    exit_code = 0
    for path, result in zip(args.files, results):
        if result is None:
            print(f"{path}: rejected (gateway mac invalid)")
            exit_code = 1
            continue
        print(f"{path}: processed={result.processed} failed={len(result.failed)}")
        for failure in result.failed:
            print(f"  ✗ {failure.mac or '-'}: {failure.reason}")
    if exit_code:
        sys.exit(exit_code)


def cmd_push(args, config, ctx=None) -> None:
    """Отправляет снапшот в POST {url}/device-sync."""
    import requests

    body = load_json_file(args.file)
    url = args.url.rstrip("/") + "/device-sync"
    try:
        response = requests.post(url, json=body, timeout=args.timeout)
    except requests.RequestException as e:
        logger.error(f"Ошибка отправки на {url}: {e}")
        sys.exit(1)

    try:
        payload = response.json()
    except ValueError:
        payload = {"status": response.status_code, "body": response.text}
    print_json(payload)
    if not response.ok:
        logger.error(f"API вернул {response.status_code}")
        sys.exit(1)

