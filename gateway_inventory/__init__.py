"""
Gateway Inventory.

Сервис сверки снапшотов сетевого обнаружения от полевых шлюзов
(камеры, NVR, беспроводные мосты, коммутаторы) с каноническим
инвентарём устройств проекта и построение дерева топологии.

Пример использования:
    python -m gateway_inventory serve
    python -m gateway_inventory sync snapshot.json
    python -m gateway_inventory tree layout.json
"""

__version__ = "0.4.0"
