from typing import Any, List

from fastapi import APIRouter, Depends, Query

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.editor.canvas import CanvasController, Viewport
from infinity_timeline.editor.date_ruler import DateRuler
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.get("/", response_model=List[schemas.flow.Flow], dependencies=[jwt_auth])
def read_flows(
    skip: int = 0,
    limit: int = 100,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Retrieve flows.

    Admins see every template and instance flow.
    Clients see the flows of their own timelines.
    """
    return store.list_flows(skip=skip, limit=limit)


@router.post("/", response_model=schemas.flow.Flow, dependencies=[jwt_auth])
def create_flow(
    *,
    flow_in: schemas.flow.FlowCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Create new flow.

    Bind it to a timeline template (template flow) or to a client timeline
    (instance flow). The name defaults to the bound template or timeline name.
    Admin only.
    """
    return store.create_flow(flow_in)


@router.get("/{flow_id}", response_model=schemas.flow.Flow, dependencies=[jwt_auth])
def read_flow(*, flow_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get flow by ID.
    """
    return store.get_flow(flow_id)


@router.put("/{flow_id}", response_model=schemas.flow.Flow, dependencies=[jwt_auth])
def update_flow(
    *,
    flow_id: int,
    flow_in: schemas.flow.FlowUpdate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Update a flow's name or ruler dates. Admin only.
    """
    return store.update_flow(flow_id, flow_in)


@router.delete("/{flow_id}", response_model=schemas.flow.Flow, dependencies=[jwt_auth])
def delete_flow(*, flow_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Delete a flow with all of its nodes, edges and node resources. Admin only.
    """
    return store.delete_flow(flow_id)


@router.get(
    "/{flow_id}/graph", response_model=schemas.flow.FlowGraph, dependencies=[jwt_auth]
)
def read_flow_graph(*, flow_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the nodes and edges of a flow.

    Nodes are ordered by horizontal position.
    """
    return store.load_flow(flow_id)


@router.get(
    "/{flow_id}/canvas",
    response_model=schemas.editor.CanvasSnapshot,
    dependencies=[jwt_auth],
)
def read_flow_canvas(
    *,
    flow_id: int,
    width: float = Query(1200, gt=0, description="Viewport width in pixels"),
    height: float = Query(800, gt=0, description="Viewport height in pixels"),
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Get the flow as drawn on the canvas: resolved node styles, edge strokes,
    minimap colors and a viewport fitted to the nodes.
    """
    store.get_flow(flow_id)
    controller = CanvasController(store, flow_id, viewport=Viewport(width=width, height=height))
    controller.load()
    return controller.render()


@router.get(
    "/{flow_id}/ruler", response_model=schemas.editor.DateRuler, dependencies=[jwt_auth]
)
def read_flow_ruler(*, flow_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the date ruler of a flow: one mark every 30 days across its range.
    """
    start, end = store.flow_date_range(flow_id)
    return DateRuler(start, end).to_schema()


@router.post("/{flow_id}/nodes", response_model=schemas.flow.Node, dependencies=[jwt_auth])
def create_node(
    *,
    flow_id: int,
    node_in: schemas.flow.NodeCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Add a node of the given type at a canvas position. Admin only.
    """
    return store.create_node(flow_id, node_in.node_type, node_in.x, node_in.y)


@router.post("/{flow_id}/edges", response_model=schemas.flow.Edge, dependencies=[jwt_auth])
def create_edge(
    *,
    flow_id: int,
    edge_in: schemas.flow.EdgeCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Connect two nodes of the flow. Admin only.

    Raises:
    - 409: If either endpoint is missing or belongs to another flow
    """
    return store.create_edge(flow_id, edge_in)
