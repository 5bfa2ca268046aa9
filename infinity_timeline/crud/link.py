from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.node_resources import NodeLink
from infinity_timeline.schemas.node_resources import LinkCreate


def get_link(db: Session, link_id: int) -> Optional[NodeLink]:
    return db.query(NodeLink).filter(NodeLink.id == link_id).first()


def get_links(db: Session, node_id: int) -> List[NodeLink]:
    """Links are read newest first."""
    return (
        db.query(NodeLink)
        .filter(NodeLink.node_id == node_id)
        .order_by(NodeLink.created_at.desc(), NodeLink.id.desc())
        .all()
    )


def create_link(
    db: Session, node_id: int, link: LinkCreate, created_by: Optional[int] = None
) -> NodeLink:
    db_link = NodeLink(node_id=node_id, created_by=created_by, **link.model_dump())
    db.add(db_link)
    db.commit()
    db.refresh(db_link)
    return db_link


def delete_link(db: Session, db_link: NodeLink) -> NodeLink:
    db.delete(db_link)
    db.commit()
    return db_link
