"""
Команда serve.

Запуск HTTP API через uvicorn.
"""

import logging

logger = logging.getLogger(__name__)


def cmd_serve(args, config, ctx=None) -> None:
    """Запускает API. Хост и порт: аргументы > config.api."""
    import uvicorn

    from ...api.main import create_app
    from ...container import Container

    host = args.host or config.api.host
    port = args.port or config.api.port
    container = Container.from_config(config, backend=args.storage)

    logger.info(f"Запуск API на {host}:{port} (storage={args.storage or config.storage.backend})")
    uvicorn.run(create_app(container=container), host=host, port=port, log_config=None)
