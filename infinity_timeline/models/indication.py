from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime
from infinity_timeline.db.database import Base
from infinity_timeline.models.enums import IndicationStatus


class Indication(Base):
    __tablename__ = "indications"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    indicated_name = Column(String, nullable=False)
    indicated_email = Column(String, nullable=True)
    indicated_phone = Column(String, nullable=True)
    status = Column(String, nullable=False, default=IndicationStatus.PENDENTE.value)
    points_awarded = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PointHistory(Base):
    __tablename__ = "point_history"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    points_change = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
