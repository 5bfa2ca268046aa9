"""
Authentication module for JWT validation and flow access checks.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from dataclasses import dataclass
from typing import Optional, Union

from infinity_timeline.core.config import settings
from infinity_timeline.core.exceptions import AuthorizationError, NotFoundError
from infinity_timeline.core.security import ALGORITHM
from infinity_timeline.db.database import get_db
from infinity_timeline.crud.user import get
from infinity_timeline.models.flow import Flow
from infinity_timeline.models.user import User as UserModel
from infinity_timeline.schemas.user import TokenPayload

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


@dataclass(frozen=True)
class Actor:
    """Identity and capability of the user performing an operation."""

    id: int
    is_admin: bool

    @classmethod
    def from_user(cls, user: UserModel) -> "Actor":
        return cls(id=user.id, is_admin=user.is_admin)


ActorLike = Union[Actor, UserModel]


async def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> UserModel:
    """
    Get the current authenticated user from the JWT token.

    Args:
        db: Database session dependency
        token: JWT token extracted from the request

    Returns:
        The authenticated user

    Raises:
        HTTPException: If the token is invalid or the user doesn't exist
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user = get(db, user_id=int(token_data.sub))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def get_current_active_user(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """
    Get the current active user.

    Raises:
        HTTPException: If the user is not active
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


async def get_current_admin(
    current_user: UserModel = Depends(get_current_active_user),
) -> UserModel:
    """
    Get the current user, requiring the admin role.

    Raises:
        HTTPException: If the user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return current_user


def require_admin(actor: Optional[ActorLike], action_name: str) -> None:
    """
    Check that the actor may perform an admin-only action.

    Args:
        actor: The user performing the action
        action_name: Name of the action being performed (for error message)

    Raises:
        AuthorizationError: If the actor is missing or not an admin
    """
    if actor is None or not actor.is_admin:
        raise AuthorizationError(f"Only admins can {action_name}")


def can_view_flow(actor: Optional[ActorLike], flow: Flow) -> bool:
    """
    Template flows are visible to admins only. Instance flows are visible to
    admins and to the client that owns the bound timeline.
    """
    if actor is None:
        return False
    if actor.is_admin:
        return True
    if flow.is_template or flow.client_timeline is None:
        return False
    return flow.client_timeline.client_id == actor.id


def check_flow_access(
    actor: Optional[ActorLike],
    flow: Optional[Flow],
    action_name: str = "access",
    *,
    admin_only: bool = False,
) -> Flow:
    """
    Check if a user may perform an action on a flow.

    Args:
        actor: Current user
        flow: The flow, or None when it was not found
        action_name: Name of the action being performed (for error message)
        admin_only: Whether the action is reserved to admins

    Returns:
        The flow, so the call can be chained

    Raises:
        NotFoundError: If the flow is None
        AuthorizationError: If the user doesn't have permission
    """
    if flow is None:
        raise NotFoundError("Flow not found")

    if admin_only:
        require_admin(actor, action_name)
        return flow

    if not can_view_flow(actor, flow):
        raise AuthorizationError(f"Not enough permissions to {action_name} this flow")
    return flow


# Dependencies for different auth levels
jwt_auth = Depends(get_current_active_user)
admin_auth = Depends(get_current_admin)
