from typing import Any

from fastapi import APIRouter, Depends

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.delete(
    "/{link_id}", response_model=schemas.node_resources.Link, dependencies=[jwt_auth]
)
def delete_link(*, link_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Delete a link. Admin only.
    """
    return store.delete_link(link_id)
