from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.timeline import (
    ClientTimeline,
    TimelineItem,
    TimelineTemplate,
    TimelineTemplateItem,
)


def get_template(db: Session, template_id: int) -> Optional[TimelineTemplate]:
    return db.query(TimelineTemplate).filter(TimelineTemplate.id == template_id).first()


def get_template_items(db: Session, template_id: int) -> List[TimelineTemplateItem]:
    return (
        db.query(TimelineTemplateItem)
        .filter(TimelineTemplateItem.template_id == template_id)
        .order_by(TimelineTemplateItem.display_order, TimelineTemplateItem.id)
        .all()
    )


def get_client_timeline(db: Session, timeline_id: int) -> Optional[ClientTimeline]:
    return db.query(ClientTimeline).filter(ClientTimeline.id == timeline_id).first()


def get_client_timeline_by_client(
    db: Session, client_id: int
) -> Optional[ClientTimeline]:
    return db.query(ClientTimeline).filter(ClientTimeline.client_id == client_id).first()


def get_timeline_item(db: Session, item_id: int) -> Optional[TimelineItem]:
    return db.query(TimelineItem).filter(TimelineItem.id == item_id).first()


def get_timeline_items(db: Session, client_timeline_id: int) -> List[TimelineItem]:
    return (
        db.query(TimelineItem)
        .filter(TimelineItem.client_timeline_id == client_timeline_id)
        .order_by(TimelineItem.due_date, TimelineItem.id)
        .all()
    )
