from fastapi import APIRouter

from infinity_timeline.api.endpoints import (
    auth,
    flows,
    nodes,
    edges,
    documents,
    links,
    kanban,
    functions,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(flows.router, prefix="/flows", tags=["Flows"])
api_router.include_router(nodes.router, prefix="/nodes", tags=["Nodes"])
api_router.include_router(edges.router, prefix="/edges", tags=["Edges"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(links.router, prefix="/links", tags=["Links"])
api_router.include_router(kanban.router, prefix="/kanban", tags=["Kanban"])
api_router.include_router(functions.router, prefix="/functions", tags=["Functions"])
