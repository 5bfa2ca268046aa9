from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from datetime import datetime
from infinity_timeline.db.database import Base


class NodeComment(Base):
    __tablename__ = "timeline_node_comments"

    id = Column(Integer, primary_key=True, index=True)
    node_id = Column(
        Integer,
        ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class NodeDocument(Base):
    __tablename__ = "timeline_node_documents"

    id = Column(Integer, primary_key=True, index=True)
    node_id = Column(
        Integer,
        ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    file_path = Column(String, nullable=False, unique=True)
    file_type = Column(String, nullable=True)
    file_size = Column(BigInteger, nullable=True)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class NodeLink(Base):
    __tablename__ = "timeline_node_links"

    id = Column(Integer, primary_key=True, index=True)
    node_id = Column(
        Integer,
        ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    url = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class KanbanBoard(Base):
    __tablename__ = "timeline_node_kanban_boards"

    id = Column(Integer, primary_key=True, index=True)
    node_id = Column(
        Integer,
        ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


class KanbanCard(Base):
    __tablename__ = "timeline_node_kanban_cards"
    __table_args__ = (
        CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_kanban_cards_progress"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    board_id = Column(
        Integer,
        ForeignKey("timeline_node_kanban_boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    progress = Column(Integer, nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
