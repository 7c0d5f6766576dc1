"""
Domain Layer для Gateway Inventory.

Чистая логика без хранилищ и транспорта:
- identity: нормализация MAC/IP/типа/времени из снапшотов
- bridge_role: роль беспроводного моста (AP/ST)
- topology: раскладка дерева топологии от OFC коммутаторов

Использование:
    from gateway_inventory.core.domain import normalize_mac, TreeLayoutBuilder

    mac = normalize_mac("00-11-22-33-44-55")  # "00:11:22:33:44:55"
    layout = TreeLayoutBuilder().build(elements, connections)
"""

from .identity import (
    FieldResult,
    check_mac,
    check_type,
    clean_text,
    extract_metrics,
    extract_statuses,
    normalize_ip,
    normalize_mac,
    normalize_timestamp,
    normalize_type,
)
from .bridge_role import (
    BridgeRole,
    collect_bridge_role_candidates,
    match_bridge_role,
    resolve_bridge_role,
    resolve_display_bridge_role,
)
from .topology import (
    TreeLayout,
    TreeLayoutBuilder,
    TreeLayoutEdge,
    TreeLayoutNode,
    get_device_category,
)

__all__ = [
    "FieldResult",
    "check_mac",
    "check_type",
    "clean_text",
    "extract_metrics",
    "extract_statuses",
    "normalize_ip",
    "normalize_mac",
    "normalize_timestamp",
    "normalize_type",
    "BridgeRole",
    "collect_bridge_role_candidates",
    "match_bridge_role",
    "resolve_bridge_role",
    "resolve_display_bridge_role",
    "TreeLayout",
    "TreeLayoutBuilder",
    "TreeLayoutEdge",
    "TreeLayoutNode",
    "get_device_category",
]
