from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from infinity_timeline.models.flow import TimelineNode


def get_node(db: Session, node_id: int) -> Optional[TimelineNode]:
    return db.query(TimelineNode).filter(TimelineNode.id == node_id).first()


def get_nodes(db: Session, flow_id: int) -> List[TimelineNode]:
    """
    Get the nodes of a flow ordered by horizontal position.
    Ties keep insertion order (id).
    """
    return (
        db.query(TimelineNode)
        .filter(TimelineNode.flow_id == flow_id)
        .order_by(TimelineNode.position_x, TimelineNode.id)
        .all()
    )


def create_node(db: Session, **values: Any) -> TimelineNode:
    db_node = TimelineNode(**values)
    db.add(db_node)
    db.commit()
    db.refresh(db_node)
    return db_node


def update_node(
    db: Session, db_node: TimelineNode, update_data: Dict[str, Any]
) -> TimelineNode:
    """Apply all changed fields in a single UPDATE."""
    for field, value in update_data.items():
        setattr(db_node, field, value)

    db.add(db_node)
    db.commit()
    db.refresh(db_node)
    return db_node


def update_position(
    db: Session, db_node: TimelineNode, x: float, y: float
) -> TimelineNode:
    return update_node(db, db_node, {"position_x": x, "position_y": y})


def delete_node(db: Session, db_node: TimelineNode) -> TimelineNode:
    # Incident edges and node resources are removed by ON DELETE CASCADE
    db.delete(db_node)
    db.commit()
    return db_node
