"""
Topology routes — дерево топологии.

POST /api/topology/tree                                  — из переданных элементов и связей
GET  /api/projects/{project_id}/layouts/{layout_id}/tree — из текущей версии схемы

Отсутствие OFC коммутатора — не ошибка: {"empty": true, "nodes": [], "edges": []}.
"""

from fastapi import APIRouter, Depends

from ...container import Container
from ...core.exceptions import NotFoundError
from ...core.models import CanvasConnection, CanvasElement
from ..dependencies import get_container
from ..schemas import TreeRequest

router = APIRouter()


@router.post("/topology/tree")
async def build_tree(body: TreeRequest, container: Container = Depends(get_container)):
    """Строит дерево из элементов и связей запроса."""
    elements = [CanvasElement.from_dict(e.model_dump(by_alias=True)) for e in body.elements]
    connections = [CanvasConnection.from_dict(c.model_dump(by_alias=True)) for c in body.connections]
    return container.tree_builder.build(elements, connections).to_dict()


@router.get("/projects/{project_id}/layouts/{layout_id}/tree")
async def layout_tree(project_id: str, layout_id: str, container: Container = Depends(get_container)):
    """Строит дерево из текущей версии схемы."""
    version = await container.layouts.get_current_version(project_id, layout_id)
    if version is None:
        raise NotFoundError(
            f"Layout {layout_id} not found in project {project_id}",
            entity="layout",
            key=layout_id,
        )
    return container.tree_builder.build(version.elements, version.connections).to_dict()
