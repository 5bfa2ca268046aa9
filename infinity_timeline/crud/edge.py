from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.flow import DEFAULT_EDGE_COLOR, TimelineEdge
from infinity_timeline.schemas.flow import EdgeCreate


def get_edge(db: Session, edge_id: int) -> Optional[TimelineEdge]:
    return db.query(TimelineEdge).filter(TimelineEdge.id == edge_id).first()


def get_edges(db: Session, flow_id: int) -> List[TimelineEdge]:
    return (
        db.query(TimelineEdge)
        .filter(TimelineEdge.flow_id == flow_id)
        .order_by(TimelineEdge.id)
        .all()
    )


def create_edge(db: Session, flow_id: int, edge: EdgeCreate) -> TimelineEdge:
    """
    Insert an edge. The composite foreign keys make the database reject
    endpoints that are missing or belong to another flow.
    """
    db_edge = TimelineEdge(
        flow_id=flow_id,
        source_node_id=edge.source_node_id,
        target_node_id=edge.target_node_id,
        label=edge.label,
        color=edge.color or DEFAULT_EDGE_COLOR,
        animated=edge.animated,
    )
    db.add(db_edge)
    db.commit()
    db.refresh(db_edge)
    return db_edge


def delete_edge(db: Session, db_edge: TimelineEdge) -> TimelineEdge:
    db.delete(db_edge)
    db.commit()
    return db_edge
