from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from infinity_timeline.db.database import Base
from infinity_timeline.models.enums import TimelineItemStatus


class TimelineTemplate(Base):
    __tablename__ = "timeline_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration_months = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "TimelineTemplateItem",
        back_populates="template",
        order_by="TimelineTemplateItem.display_order",
        cascade="all, delete-orphan",
    )


class TimelineTemplateItem(Base):
    __tablename__ = "timeline_template_items"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(
        Integer,
        ForeignKey("timeline_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    parent_id = Column(
        Integer, ForeignKey("timeline_template_items.id"), nullable=True
    )
    created_at = Column(DateTime, default=datetime.utcnow)

    template = relationship("TimelineTemplate", back_populates="items")


class ClientTimeline(Base):
    __tablename__ = "client_timelines"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    template_id = Column(Integer, ForeignKey("timeline_templates.id"), nullable=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "TimelineItem",
        back_populates="client_timeline",
        order_by="TimelineItem.due_date",
        cascade="all, delete-orphan",
    )


class TimelineItem(Base):
    __tablename__ = "timeline_items"

    id = Column(Integer, primary_key=True, index=True)
    client_timeline_id = Column(
        Integer,
        ForeignKey("client_timelines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    template_item_id = Column(
        Integer, ForeignKey("timeline_template_items.id"), nullable=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default=TimelineItemStatus.PENDENTE.value)
    progress_status = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client_timeline = relationship("ClientTimeline", back_populates="items")
