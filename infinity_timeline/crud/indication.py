from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.indication import Indication, PointHistory


def get_indication(db: Session, indication_id: int) -> Optional[Indication]:
    return db.query(Indication).filter(Indication.id == indication_id).first()


def get_point_history(db: Session, client_id: int) -> List[PointHistory]:
    return (
        db.query(PointHistory)
        .filter(PointHistory.client_id == client_id)
        .order_by(PointHistory.created_at, PointHistory.id)
        .all()
    )


def add_points(db: Session, client, points: int, reason: str) -> PointHistory:
    """
    Credit points to a client and record the change.
    The caller commits.
    """
    client.points = (client.points or 0) + points
    entry = PointHistory(client_id=client.id, points_change=points, reason=reason)
    db.add(client)
    db.add(entry)
    db.flush()
    return entry
