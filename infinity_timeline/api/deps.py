from fastapi import Depends
from sqlalchemy.orm import Session

from infinity_timeline.core.auth import jwt_auth
from infinity_timeline.db.database import get_db
from infinity_timeline.models.user import User
from infinity_timeline.services.graph_store import GraphStore


def get_graph_store(
    db: Session = Depends(get_db), current_user: User = jwt_auth
) -> GraphStore:
    """GraphStore acting as the current user inside the request's session."""
    return GraphStore.bind(db, current_user)
