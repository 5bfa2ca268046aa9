from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.node_resources import NodeComment


def get_comments(db: Session, node_id: int) -> List[NodeComment]:
    """Comments are read oldest first."""
    return (
        db.query(NodeComment)
        .filter(NodeComment.node_id == node_id)
        .order_by(NodeComment.created_at, NodeComment.id)
        .all()
    )


def create_comment(
    db: Session, node_id: int, content: str, author_id: Optional[int] = None
) -> NodeComment:
    db_comment = NodeComment(node_id=node_id, content=content, author_id=author_id)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment
