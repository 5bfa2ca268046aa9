from typing import Any

from fastapi import APIRouter, Depends

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.delete("/{edge_id}", response_model=schemas.flow.Edge, dependencies=[jwt_auth])
def delete_edge(*, edge_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Delete an edge. Admin only.
    """
    return store.delete_edge(edge_id)
