"""
Точка входа для запуска модуля.

    python -m gateway_inventory [команда] [опции]

Примеры:
    python -m gateway_inventory serve
    python -m gateway_inventory sync snapshot.json
    python -m gateway_inventory validate-config -c config.yaml
"""

from .cli import main

if __name__ == "__main__":
    main()
