from sqlalchemy import Boolean, Column, Integer, Numeric, String, DateTime
from datetime import datetime
from infinity_timeline.db.database import Base
from infinity_timeline.models.enums import UserRole


class User(Base):
    """Authenticated account. Clients and admins share the table and differ by role."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    full_name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=UserRole.CLIENTE.value)
    points = Column(Integer, nullable=False, default=0)
    monthly_fee = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
