from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from infinity_timeline import schemas
from infinity_timeline.api.deps import get_graph_store
from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.services.graph_store import GraphStore

router = APIRouter()


@router.get("/{document_id}/download", dependencies=[jwt_auth])
def download_document(
    *, document_id: int, store: GraphStore = Depends(get_graph_store)
) -> Response:
    """
    Download the stored file of a document.
    """
    document, data = store.download_document(document_id)
    return Response(
        content=data,
        media_type=document.file_type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.title)}"
        },
    )


@router.delete(
    "/{document_id}",
    response_model=schemas.node_resources.Document,
    dependencies=[jwt_auth],
)
def delete_document(
    *, document_id: int, store: GraphStore = Depends(get_graph_store)
) -> Any:
    """
    Delete a document and its stored file. Admin only.

    Raises:
    - 404: If the document was already deleted
    - 502: If the stored file could not be removed; the document is kept
    """
    return store.delete_document(document_id)
