from typing import Optional
from pydantic import BaseModel, EmailStr
from datetime import datetime

from infinity_timeline.models.enums import UserRole


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenPayload(BaseModel):
    sub: Optional[str] = None


class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    role: UserRole = UserRole.CLIENTE
    is_active: bool = True


class UserCreate(UserBase):
    password: str
    monthly_fee: Optional[float] = None


# Schema for reading a user (response model)
class User(UserBase):
    id: int
    points: int
    monthly_fee: Optional[float] = None
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True
