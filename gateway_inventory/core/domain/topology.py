"""
Построение дерева топологии для визуализации.

Вход: размещённые на схеме элементы и связи между ними.
Выход: лес с глубиной и координатами (x, y) для каждого узла.

Алгоритм:
1. Корни — коммутаторы, у которых имя или модель содержит маркер "ofc".
   Нет корней — пустой результат (сигнал "нет магистрального коммутатора").
2. Неориентированная смежность по ID элементов. Концы связи разрешаются
   по нескольким ключам: deviceId, deviceMac, id элемента,
   metadata.sourceDeviceId, metadata.sourceDeviceMac.
3. BFS одновременно от всех корней. Недостижимые узлы не попадают в результат.
4. y снизу вверх: листья получают последовательные слоты, родитель —
   среднее y детей. x = depth * horizontal_spacing.
5. y сдвигаются так, чтобы минимум был 0.
6. Рёбра только для использованных связей parent -> child.

Построитель никогда не бросает исключений.

Пример:
    builder = TreeLayoutBuilder()
    layout = builder.build(elements, connections)
    if layout.is_empty:
        print("Нет OFC коммутатора")
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Sequence

from ..constants import TREE_HORIZONTAL_SPACING, TREE_ROOT_MARKER, TREE_VERTICAL_SPACING
from ..models import CanvasConnection, CanvasElement
from .bridge_role import resolve_display_bridge_role

logger = logging.getLogger(__name__)


def get_device_category(device_type: Optional[str]) -> str:
    """
    Категория устройства по свободной строке типа из редактора.

    Returns:
        switch | bridge | camera | nvr | other
    """
    normalized = (device_type or "").lower()
    if not normalized:
        return "other"
    if "switch" in normalized:
        return "switch"
    if any(marker in normalized for marker in ("bridge", "relay", "ap")):
        return "bridge"
    if any(marker in normalized for marker in ("camera", "cam", "ptz", "bullet", "dome", "ipc")):
        return "camera"
    if "nvr" in normalized or "recorder" in normalized:
        return "nvr"
    return "other"


def make_edge_key(a: str, b: str) -> str:
    """Ключ неориентированного ребра: отсортированная пара "a|b"."""
    return f"{a}|{b}" if a < b else f"{b}|{a}"


def element_keys(element: CanvasElement) -> List[str]:
    """Все ключи, по которым связь может ссылаться на элемент (без дублей)."""
    metadata = element.metadata or {}
    keys: List[str] = []
    for value in (
        element.device_id,
        element.device_mac,
        element.id,
        metadata.get("sourceDeviceId"),
        metadata.get("sourceDeviceMac"),
    ):
        if value and isinstance(value, str) and value not in keys:
            keys.append(value)
    return keys


@dataclass
class TreeLayoutNode:
    """Узел дерева с позицией."""
    element: CanvasElement
    depth: int
    x: float
    y: float
    parent_id: Optional[str] = None
    bridge_role: Optional[str] = None

    @property
    def id(self) -> str:
        return self.element.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.element.id,
            "element": self.element.to_dict(),
            "depth": self.depth,
            "position": {"x": self.x, "y": self.y},
            "parentId": self.parent_id,
            "bridgeRole": self.bridge_role,
        }


@dataclass
class TreeLayoutEdge:
    """Ребро дерева parent -> child."""
    id: str
    from_node_id: str
    to_node_id: str
    connection: Optional[CanvasConnection] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fromNodeId": self.from_node_id,
            "toNodeId": self.to_node_id,
            "connection": self.connection.to_dict() if self.connection else None,
        }


@dataclass
class TreeLayout:
    """Результат построения. Пустой результат — явный сигнал "дерева нет"."""
    nodes: List[TreeLayoutNode] = field(default_factory=list)
    edges: List[TreeLayoutEdge] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "empty": self.is_empty,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class _ArenaNode:
    element: CanvasElement
    depth: int
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    y: float = 0.0


class TreeLayoutBuilder:
    """
    Построитель раскладки дерева.

    Узлы хранятся в массиве (arena) и ссылаются друг на друга по индексу;
    расчёт y идёт явным post-order обходом со стеком, без рекурсии,
    поэтому глубина топологии не ограничена стеком вызовов.
    """

    def __init__(
        self,
        horizontal_spacing: int = TREE_HORIZONTAL_SPACING,
        vertical_spacing: int = TREE_VERTICAL_SPACING,
        root_marker: str = TREE_ROOT_MARKER,
    ):
        self.horizontal_spacing = horizontal_spacing
        self.vertical_spacing = vertical_spacing
        self.root_marker = root_marker.lower()

    def is_root(self, element: CanvasElement) -> bool:
        """Коммутатор с маркером в имени или модели."""
        if get_device_category(element.type) != "switch":
            return False
        name = (element.name or "").lower()
        model = element.metadata.get("model") if element.metadata else None
        model = model.lower() if isinstance(model, str) else ""
        return self.root_marker in name or self.root_marker in model

    def build(
        self,
        elements: Sequence[CanvasElement],
        connections: Sequence[CanvasConnection],
    ) -> TreeLayout:
        """
        Строит раскладку.

        Args:
            elements: Размещённые элементы схемы
            connections: Связи редактора

        Returns:
            TreeLayout (пустой если нет элементов или корней)
        """
        if not elements:
            return TreeLayout()

        key_map: Dict[str, CanvasElement] = {}
        element_by_id: Dict[str, CanvasElement] = {}
        for element in elements:
            element_by_id[element.id] = element
            for key in element_keys(element):
                key_map[key] = element

        # dict вместо set: сохраняем порядок добавления соседей
        adjacency: Dict[str, Dict[str, None]] = {e.id: {} for e in elements}
        edge_details: Dict[str, CanvasConnection] = {}
        dropped = 0
        for connection in connections:
            source = key_map.get(connection.from_device_id) if connection.from_device_id else None
            target = key_map.get(connection.to_device_id) if connection.to_device_id else None
            if source is None or target is None:
                dropped += 1
                continue
            adjacency[source.id][target.id] = None
            adjacency[target.id][source.id] = None
            edge_details[make_edge_key(source.id, target.id)] = connection
        if dropped:
            logger.debug(f"Пропущено связей без разрешённых концов: {dropped}")

        roots = [e for e in elements if self.is_root(e)]
        if not roots:
            logger.debug("Нет корневого коммутатора, дерево не строится")
            return TreeLayout()

        arena = self._traverse(roots, adjacency, element_by_id)
        self._assign_y(arena)

        min_y = min(node.y for node in arena)
        nodes: List[TreeLayoutNode] = []
        edges: List[TreeLayoutEdge] = []
        for node in arena:
            parent_id = arena[node.parent].element.id if node.parent is not None else None
            category = get_device_category(node.element.type)
            bridge_role = None
            if category == "bridge":
                bridge_role = resolve_display_bridge_role(node.element.metadata, node.element.name).value
            nodes.append(TreeLayoutNode(
                element=node.element,
                depth=node.depth,
                x=node.depth * self.horizontal_spacing,
                y=node.y - min_y,
                parent_id=parent_id,
                bridge_role=bridge_role,
            ))
            if parent_id is not None:
                edge_key = make_edge_key(node.element.id, parent_id)
                detail = edge_details.get(edge_key)
                edges.append(TreeLayoutEdge(
                    id=detail.id if detail and detail.id else edge_key,
                    from_node_id=parent_id,
                    to_node_id=node.element.id,
                    connection=detail,
                ))

        return TreeLayout(nodes=nodes, edges=edges)

    def _traverse(
        self,
        roots: Sequence[CanvasElement],
        adjacency: Dict[str, Dict[str, None]],
        element_by_id: Dict[str, CanvasElement],
    ) -> List[_ArenaNode]:
        """Multi-source BFS: каждый узел посещается один раз."""
        arena: List[_ArenaNode] = []
        visited = set()
        queue: Deque[int] = deque()

        for root in roots:
            if root.id in visited:
                continue
            visited.add(root.id)
            arena.append(_ArenaNode(element=root, depth=0))
            queue.append(len(arena) - 1)

        while queue:
            index = queue.popleft()
            current = arena[index]
            for neighbor_id in adjacency.get(current.element.id, {}):
                if neighbor_id in visited:
                    continue
                visited.add(neighbor_id)
                neighbor = element_by_id.get(neighbor_id)
                if neighbor is None:
                    continue
                arena.append(_ArenaNode(element=neighbor, depth=current.depth + 1, parent=index))
                child_index = len(arena) - 1
                current.children.append(child_index)
                queue.append(child_index)
        return arena

    def _assign_y(self, arena: List[_ArenaNode]) -> None:
        """
        Post-order обход: лист получает следующий слот, родитель — среднее детей.

        Между поддеревьями разных корней остаётся один пустой слот.
        """
        leaf_index = 0
        root_indexes = [i for i, node in enumerate(arena) if node.parent is None]
        for position, root_index in enumerate(root_indexes):
            if position > 0:
                leaf_index += 1
            stack = [(root_index, False)]
            while stack:
                index, expanded = stack.pop()
                node = arena[index]
                if not expanded:
                    stack.append((index, True))
                    for child in reversed(node.children):
                        stack.append((child, False))
                    continue
                if not node.children:
                    node.y = leaf_index * self.vertical_spacing
                    leaf_index += 1
                else:
                    node.y = sum(arena[c].y for c in node.children) / len(node.children)
