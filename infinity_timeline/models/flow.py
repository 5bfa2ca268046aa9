from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from infinity_timeline.db.database import Base
from infinity_timeline.models.enums import NodeShape, NodeType

DEFAULT_EDGE_COLOR = "#00f5ff"


class Flow(Base):
    """
    Graph scope. A flow bound to a client timeline is an instance flow,
    otherwise it is a template flow.
    """

    __tablename__ = "flows"
    __table_args__ = (
        CheckConstraint(
            "template_id IS NULL OR client_timeline_id IS NULL",
            name="ck_flows_single_binding",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    template_id = Column(
        Integer,
        ForeignKey("timeline_templates.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    client_timeline_id = Column(
        Integer,
        ForeignKey("client_timelines.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    # Optional overrides for the date ruler range
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    template = relationship("TimelineTemplate")
    client_timeline = relationship("ClientTimeline")

    @property
    def is_template(self) -> bool:
        return self.client_timeline_id is None


class TimelineNode(Base):
    __tablename__ = "timeline_nodes"
    # Edges reference (id, flow_id) so both endpoints are pinned to one flow
    __table_args__ = (UniqueConstraint("id", "flow_id", name="uq_timeline_nodes_id_flow"),)

    id = Column(Integer, primary_key=True, index=True)
    flow_id = Column(
        Integer, ForeignKey("flows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    node_type = Column(String, nullable=False, default=NodeType.CUSTOM.value)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    position_x = Column(Float, nullable=False)
    position_y = Column(Float, nullable=False)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)
    color = Column(String, nullable=True)
    glow_color = Column(String, nullable=True)
    node_shape = Column(String, nullable=False, default=NodeShape.ROUNDED.value)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TimelineEdge(Base):
    __tablename__ = "timeline_edges"
    __table_args__ = (
        ForeignKeyConstraint(
            ["source_node_id", "flow_id"],
            ["timeline_nodes.id", "timeline_nodes.flow_id"],
            ondelete="CASCADE",
            name="fk_timeline_edges_source",
        ),
        ForeignKeyConstraint(
            ["target_node_id", "flow_id"],
            ["timeline_nodes.id", "timeline_nodes.flow_id"],
            ondelete="CASCADE",
            name="fk_timeline_edges_target",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    flow_id = Column(
        Integer, ForeignKey("flows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_node_id = Column(Integer, nullable=False, index=True)
    target_node_id = Column(Integer, nullable=False, index=True)
    label = Column(String, nullable=True)
    color = Column(String, nullable=False, default=DEFAULT_EDGE_COLOR)
    animated = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
