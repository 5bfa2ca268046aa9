from typing import Any

from fastapi import APIRouter, Depends

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.post(
    "/boards/{board_id}/cards",
    response_model=schemas.node_resources.KanbanCard,
    dependencies=[jwt_auth],
)
def create_card(
    *,
    board_id: int,
    card_in: schemas.node_resources.KanbanCardCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Add a card to a board. Tags may be sent as a list or a comma separated
    string; progress must be between 0 and 100. Admin only.
    """
    return store.add_card(board_id, card_in)


@router.delete(
    "/cards/{card_id}",
    response_model=schemas.node_resources.KanbanCard,
    dependencies=[jwt_auth],
)
def delete_card(*, card_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Delete a card. Admin only.
    """
    return store.delete_card(card_id)
