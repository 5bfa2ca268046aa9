from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from infinity_timeline.core.auth import admin_auth
from infinity_timeline.db.database import get_db
from infinity_timeline.models.user import User
from infinity_timeline.schemas import functions as fn
from infinity_timeline.services import functions as function_service

router = APIRouter()


@router.post(
    "/approve-indication",
    response_model=fn.ApproveIndicationResponse,
    dependencies=[admin_auth],
)
def approve_indication(
    *, db: Session = Depends(get_db), request: fn.ApproveIndicationRequest
) -> Any:
    """
    Approve a pending indication and credit the referring client with 25%
    of their monthly fee in points.

    Raises:
    - 400: If the indication is not pending
    - 404: If the indication does not exist
    """
    return function_service.approve_indication(db, request.indication_id)


@router.post(
    "/assign-timeline",
    response_model=fn.AssignTimelineResponse,
    dependencies=[admin_auth],
)
def assign_timeline(
    *,
    db: Session = Depends(get_db),
    request: fn.AssignTimelineRequest,
    current_user: User = admin_auth,
) -> Any:
    """
    Assign a template to a client, creating the client timeline, its items
    spread over the template duration and an empty instance flow.

    Raises:
    - 400: If the client already has a timeline
    - 404: If the client or the template does not exist
    """
    return function_service.assign_timeline(db, request, created_by=current_user.id)


@router.post(
    "/create-client",
    response_model=fn.CreateClientResponse,
    dependencies=[admin_auth],
)
def create_client(*, db: Session = Depends(get_db), request: fn.CreateClientRequest) -> Any:
    """
    Create a client account.

    Raises:
    - 400: If the password is shorter than 6 characters or the email is taken
    """
    return function_service.create_client(db, request)


@router.post(
    "/import-timeline",
    response_model=fn.ImportTimelineResponse,
    dependencies=[admin_auth],
)
def import_timeline(
    *,
    db: Session = Depends(get_db),
    request: fn.ImportTimelineRequest,
    current_user: User = admin_auth,
) -> Any:
    """
    Create a timeline template with its items and template flow.

    Raises:
    - 400: If no items are given or an item cannot be inserted
    """
    return function_service.import_timeline(db, request, created_by=current_user.id)


@router.post(
    "/update-timeline-progress",
    response_model=fn.UpdateTimelineProgressResponse,
    dependencies=[admin_auth],
)
def update_timeline_progress(
    *, db: Session = Depends(get_db), request: fn.UpdateTimelineProgressRequest
) -> Any:
    """
    Record the progress status of a timeline item and award the matching points.
    """
    return function_service.update_timeline_progress(db, request)
