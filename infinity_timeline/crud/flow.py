from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.flow import Flow
from infinity_timeline.models.timeline import ClientTimeline
from infinity_timeline.schemas.flow import FlowCreate, FlowUpdate


def get_flow(db: Session, flow_id: int) -> Optional[Flow]:
    return db.query(Flow).filter(Flow.id == flow_id).first()


def get_flow_by_client_timeline(
    db: Session, client_timeline_id: int
) -> Optional[Flow]:
    return db.query(Flow).filter(Flow.client_timeline_id == client_timeline_id).first()


def get_flows(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    client_id: Optional[int] = None,
) -> List[Flow]:
    """
    Get flows ordered by id

    If client_id is provided, only the instance flows of that client are returned
    """
    query = db.query(Flow)

    if client_id is not None:
        query = query.join(ClientTimeline, Flow.client_timeline_id == ClientTimeline.id)
        query = query.filter(ClientTimeline.client_id == client_id)

    return query.order_by(Flow.id).offset(skip).limit(limit).all()


def create_flow(
    db: Session,
    flow: FlowCreate,
    name: str,
    created_by: Optional[int] = None,
) -> Flow:
    data = flow.model_dump(exclude={"name"})
    db_flow = Flow(**data, name=name, created_by=created_by)
    db.add(db_flow)
    db.commit()
    db.refresh(db_flow)
    return db_flow


def update_flow(db: Session, db_flow: Flow, flow: FlowUpdate) -> Flow:
    update_data = flow.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(db_flow, field, value)

    db.add(db_flow)
    db.commit()
    db.refresh(db_flow)
    return db_flow


def delete_flow(db: Session, db_flow: Flow) -> Flow:
    # Nodes, edges and node resources go with the flow through ON DELETE CASCADE
    db.delete(db_flow)
    db.commit()
    return db_flow
