from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.editor.detail_editor import TAB_LABELS, tabs_for
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.get("/{node_id}", response_model=schemas.flow.Node, dependencies=[jwt_auth])
def read_node(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get node by ID.
    """
    return store.get_node(node_id)


@router.put("/{node_id}", response_model=schemas.flow.Node, dependencies=[jwt_auth])
def update_node(
    *,
    node_id: int,
    node_in: schemas.flow.NodeUpdate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Update title, description, colors and shape of a node in one write. Admin only.
    """
    return store.update_node(node_id, node_in)


@router.patch(
    "/{node_id}/position", response_model=schemas.flow.Node, dependencies=[jwt_auth]
)
def update_node_position(
    *,
    node_id: int,
    position: schemas.flow.NodePosition,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Persist the position of a node after a drag. Admin only.
    """
    return store.update_node_position(node_id, position.x, position.y)


@router.delete("/{node_id}", response_model=schemas.flow.Node, dependencies=[jwt_auth])
def delete_node(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Delete a node together with its edges, comments, documents, links and
    kanban boards. Admin only.
    """
    return store.delete_node(node_id)


@router.get(
    "/{node_id}/tabs", response_model=List[schemas.editor.NodeTab], dependencies=[jwt_auth]
)
def read_node_tabs(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the detail tabs available for a node.
    """
    node = store.get_node(node_id)
    return [
        schemas.editor.NodeTab(name=tab.value, label=TAB_LABELS[tab])
        for tab in tabs_for(node.node_type)
    ]


@router.get(
    "/{node_id}/comments",
    response_model=List[schemas.node_resources.Comment],
    dependencies=[jwt_auth],
)
def read_comments(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the comments of a node, oldest first.
    """
    return store.list_comments(node_id)


@router.post(
    "/{node_id}/comments",
    response_model=schemas.node_resources.Comment,
    dependencies=[jwt_auth],
)
def create_comment(
    *,
    node_id: int,
    comment_in: schemas.node_resources.CommentCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Comment on a node. Allowed to admins and to the client owning the flow.
    """
    return store.add_comment(node_id, comment_in.content)


@router.get(
    "/{node_id}/documents",
    response_model=List[schemas.node_resources.Document],
    dependencies=[jwt_auth],
)
def read_documents(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the documents attached to a node, newest first.
    """
    return store.list_documents(node_id)


@router.post(
    "/{node_id}/documents",
    response_model=schemas.node_resources.Document,
    dependencies=[jwt_auth],
)
async def upload_document(
    *,
    node_id: int,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Attach a file to a node. Admin only.

    Raises:
    - 502: If the file could not be stored
    """
    data = await file.read()
    return store.upload_document(
        node_id, file.filename, data, content_type=file.content_type, title=title
    )


@router.get(
    "/{node_id}/links",
    response_model=List[schemas.node_resources.Link],
    dependencies=[jwt_auth],
)
def read_links(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the links of a node, newest first. YouTube links carry their video id.
    """
    return store.list_links(node_id)


@router.post(
    "/{node_id}/links",
    response_model=schemas.node_resources.Link,
    dependencies=[jwt_auth],
)
def create_link(
    *,
    node_id: int,
    link_in: schemas.node_resources.LinkCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Add a link to a node. Admin only.
    """
    return store.add_link(node_id, link_in)


@router.get(
    "/{node_id}/kanban",
    response_model=List[schemas.node_resources.KanbanBoard],
    dependencies=[jwt_auth],
)
def read_kanban(*, node_id: int, store: GraphStore = Depends(get_graph_store)) -> Any:
    """
    Get the kanban boards of a node with their cards, both ordered by position.
    """
    return store.list_kanban(node_id)


@router.post(
    "/{node_id}/kanban/boards",
    response_model=schemas.node_resources.KanbanBoard,
    dependencies=[jwt_auth],
)
def create_board(
    *,
    node_id: int,
    board_in: schemas.node_resources.KanbanBoardCreate,
    store: GraphStore = Depends(get_graph_store),
) -> Any:
    """
    Add a board after the node's existing boards. Admin only.
    """
    return store.add_board(node_id, board_in.title)
