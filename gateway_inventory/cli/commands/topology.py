"""
Команда tree.

Строит дерево топологии из JSON схемы ({elements, connections})
без хранилища и выводит раскладку или экспортирует узлы.
"""

import logging

from ...core.domain.topology import TreeLayoutBuilder
from ...core.models import LayoutVersion
from ...exporters import REPORT_TOPOLOGY, get_exporter, tree_rows
from ..utils import load_json_file, print_json

logger = logging.getLogger(__name__)


def cmd_tree(args, config, ctx=None) -> None:
    """Обработчик команды tree."""
    version = LayoutVersion.from_dict(load_json_file(args.file))
    builder = TreeLayoutBuilder(
        horizontal_spacing=config.topology.horizontal_spacing,
        vertical_spacing=config.topology.vertical_spacing,
        root_marker=config.topology.root_marker,
    )
    layout = builder.build(version.elements, version.connections)

    if layout.is_empty:
        logger.warning(f"Корневой коммутатор ({config.topology.root_marker}) не найден, дерево пустое")

    if args.format:
        exporter = get_exporter(args.format, config.output, report=REPORT_TOPOLOGY)
        exporter.export(tree_rows(layout), args.filename or "topology_tree")
        return
    print_json(layout.to_dict())
