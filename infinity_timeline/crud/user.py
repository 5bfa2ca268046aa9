from typing import Optional

from sqlalchemy.orm import Session

from infinity_timeline.core.security import get_password_hash, verify_password
from infinity_timeline.models.user import User
from infinity_timeline.schemas.user import UserCreate


def get(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create(db: Session, *, obj_in: UserCreate, commit: bool = True) -> User:
    """
    Create a user with a hashed password.

    With commit=False the row is only flushed, so the caller owns the transaction.
    """
    db_obj = User(
        email=obj_in.email,
        full_name=obj_in.full_name,
        hashed_password=get_password_hash(obj_in.password),
        role=obj_in.role.value,
        monthly_fee=obj_in.monthly_fee,
        is_active=obj_in.is_active,
        points=0,
    )
    db.add(db_obj)
    if commit:
        db.commit()
        db.refresh(db_obj)
    else:
        db.flush()
    return db_obj


def authenticate(db: Session, *, email: str, password: str) -> Optional[User]:
    user = get_by_email(db, email=email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
