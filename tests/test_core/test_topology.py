"""
Тесты дерева топологии (core/domain/topology.py).

Тестируем:
- get_device_category — категории по свободной строке типа
- TreeLayoutBuilder — BFS от OFC коммутаторов, позиции, рёбра
"""

import pytest

from gateway_inventory.core.domain.topology import (
    TreeLayoutBuilder,
    element_keys,
    get_device_category,
    make_edge_key,
)
from gateway_inventory.core.models import CanvasConnection, CanvasElement


def _element(element_id, name, element_type, **kwargs):
    return CanvasElement(id=element_id, name=name, type=element_type, **kwargs)


def _link(link_id, a, b):
    return CanvasConnection(id=link_id, from_device_id=a, to_device_id=b)


@pytest.fixture
def builder():
    return TreeLayoutBuilder(horizontal_spacing=220, vertical_spacing=150)


@pytest.fixture
def chain():
    """OFC коммутатор → мост AP → мост ST → камера."""
    elements = [
        _element("e-sw", "OFC-Core", "switch", device_id="dev-sw"),
        _element("e-ap", "Bridge AP", "bridge", device_id="dev-ap", metadata={"bridgeRole": "AP"}),
        _element("e-st", "Bridge ST", "bridge", device_mac="00:11:22:33:44:77"),
        _element("e-cam", "Cam 1", "camera", device_id="dev-cam"),
    ]
    connections = [
        _link("c1", "dev-sw", "dev-ap"),
        _link("c2", "dev-ap", "00:11:22:33:44:77"),
        _link("", "e-st", "dev-cam"),
    ]
    return elements, connections


@pytest.mark.unit
class TestDeviceCategory:
    """Тесты get_device_category."""

    @pytest.mark.parametrize("device_type,expected", [
        ("Switch", "switch"),
        ("poe-switch", "switch"),
        ("Bridge", "bridge"),
        ("relay", "bridge"),
        ("AP", "bridge"),
        ("Camera", "camera"),
        ("PTZ", "camera"),
        ("ipc", "camera"),
        ("NVR", "nvr"),
        ("Recorder", "nvr"),
        ("Router", "other"),
        ("", "other"),
        (None, "other"),
    ])
    def test_category(self, device_type, expected):
        assert get_device_category(device_type) == expected


@pytest.mark.unit
class TestHelpers:
    """Тесты вспомогательных функций."""

    def test_edge_key_is_symmetric(self):
        assert make_edge_key("b", "a") == make_edge_key("a", "b") == "a|b"

    def test_element_keys_without_duplicates(self):
        element = _element(
            "e1", "x", "camera",
            device_id="d1",
            metadata={"sourceDeviceId": "d1", "sourceDeviceMac": "aa:bb:cc:dd:ee:ff"},
        )
        assert element_keys(element) == ["d1", "e1", "aa:bb:cc:dd:ee:ff"]


@pytest.mark.unit
class TestTreeLayoutBuilder:
    """Тесты построения дерева."""

    def test_chain_depths(self, builder, chain):
        """Глубины 0..3 по цепочке, ключи связей — ID устройства, MAC, ID элемента."""
        layout = builder.build(*chain)
        depths = {node.id: node.depth for node in layout.nodes}
        assert depths == {"e-sw": 0, "e-ap": 1, "e-st": 2, "e-cam": 3}

    def test_chain_edges(self, builder, chain):
        """Три ребра parent → child; ID связи или ключ пары."""
        layout = builder.build(*chain)
        edges = [(e.id, e.from_node_id, e.to_node_id) for e in layout.edges]
        assert edges == [
            ("c1", "e-sw", "e-ap"),
            ("c2", "e-ap", "e-st"),
            ("e-cam|e-st", "e-st", "e-cam"),
        ]

    def test_positions(self, builder, chain):
        """x = глубина * шаг; у цепочки все узлы на одной высоте."""
        layout = builder.build(*chain)
        for node in layout.nodes:
            assert node.x == node.depth * 220
            assert node.y == 0

    def test_bridge_roles(self, builder, chain):
        """Роль моста для визуализации; не-мосты без роли."""
        layout = builder.build(*chain)
        roles = {node.id: node.bridge_role for node in layout.nodes}
        assert roles == {"e-sw": None, "e-ap": "AP", "e-st": "ST", "e-cam": None}

    def test_parent_ids(self, builder, chain):
        layout = builder.build(*chain)
        parents = {node.id: node.parent_id for node in layout.nodes}
        assert parents["e-sw"] is None
        assert parents["e-cam"] == "e-st"

    def test_no_root_is_empty(self, builder):
        """Без OFC коммутатора дерево пустое — это не ошибка."""
        elements = [
            _element("e1", "Core", "switch"),
            _element("e2", "Cam", "camera"),
        ]
        layout = builder.build(elements, [_link("c", "e1", "e2")])
        assert layout.is_empty
        assert layout.to_dict() == {"empty": True, "nodes": [], "edges": []}

    def test_empty_input(self, builder):
        assert builder.build([], []).is_empty

    def test_root_by_model(self, builder):
        """Маркер может быть в модели коммутатора."""
        elements = [_element("e1", "Core", "Switch", metadata={"model": "OFC-24P"})]
        layout = builder.build(elements, [])
        assert [n.id for n in layout.nodes] == ["e1"]

    def test_unresolved_connections_dropped(self, builder):
        """Связь с неизвестным концом игнорируется."""
        elements = [
            _element("e1", "ofc-1", "switch"),
            _element("e2", "Cam", "camera"),
        ]
        layout = builder.build(elements, [_link("c", "e1", "ghost"), _link("d", None, "e2")])
        assert [n.id for n in layout.nodes] == ["e1"]
        assert layout.edges == []

    def test_unreachable_elements_excluded(self, builder):
        elements = [
            _element("e1", "ofc-1", "switch"),
            _element("e2", "Cam", "camera"),
        ]
        layout = builder.build(elements, [])
        assert [n.id for n in layout.nodes] == ["e1"]

    def test_cycle_visits_each_node_once(self, builder):
        """Цикл не даёт повторных узлов."""
        elements = [
            _element("r", "OFC", "switch"),
            _element("a", "A", "camera"),
            _element("b", "B", "camera"),
        ]
        connections = [_link("1", "r", "a"), _link("2", "a", "b"), _link("3", "b", "r")]
        layout = builder.build(elements, connections)
        assert sorted(n.id for n in layout.nodes) == ["a", "b", "r"]
        assert len(layout.edges) == 2

    def test_parent_centered_over_children(self, builder):
        """Родитель по y — среднее детей."""
        elements = [
            _element("r", "OFC", "switch"),
            _element("a", "A", "camera"),
            _element("b", "B", "camera"),
        ]
        layout = builder.build(elements, [_link("1", "r", "a"), _link("2", "r", "b")])
        y = {n.id: n.y for n in layout.nodes}
        assert y["a"] == 0
        assert y["b"] == 150
        assert y["r"] == 75

    def test_multiple_roots_separated(self, builder):
        """Между поддеревьями разных корней один пустой слот."""
        elements = [
            _element("r1", "OFC-1", "switch"),
            _element("r2", "OFC-2", "switch"),
        ]
        layout = builder.build(elements, [])
        y = {n.id: n.y for n in layout.nodes}
        assert y == {"r1": 0, "r2": 300}

    def test_deep_chain_no_recursion_limit(self, builder):
        """Длинная цепочка строится без рекурсии."""
        count = 3000
        elements = [_element("n0", "OFC", "switch")]
        connections = []
        for i in range(1, count):
            elements.append(_element(f"n{i}", f"Cam {i}", "camera"))
            connections.append(_link(f"c{i}", f"n{i - 1}", f"n{i}"))
        layout = builder.build(elements, connections)
        assert len(layout.nodes) == count
        assert layout.nodes[-1].depth == count - 1

    def test_custom_root_marker(self):
        builder = TreeLayoutBuilder(root_marker="core")
        layout = builder.build([_element("e1", "CORE-1", "switch")], [])
        assert not layout.is_empty
