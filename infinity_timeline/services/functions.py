"""
Business functions run on behalf of an admin: client onboarding, timeline
import and assignment, and the points economy.

Each function owns its transaction: either everything it writes is committed
or nothing is.
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from infinity_timeline import crud
from infinity_timeline.core.dates import add_months
from infinity_timeline.core.exceptions import FunctionError, NotFoundError
from infinity_timeline.models.enums import (
    IndicationStatus,
    ProgressStatus,
    TimelineItemStatus,
    UserRole,
)
from infinity_timeline.models.flow import Flow
from infinity_timeline.models.indication import Indication
from infinity_timeline.models.timeline import (
    ClientTimeline,
    TimelineItem,
    TimelineTemplate,
    TimelineTemplateItem,
)
from infinity_timeline.schemas import functions as fn
from infinity_timeline.schemas.user import UserCreate

logger = logging.getLogger(__name__)

INDICATION_REWARD_RATE = Decimal("0.25")
ON_TIME_POINTS = 25
DAYS_PER_MONTH = 30
MIN_PASSWORD_LENGTH = 6

REASON_INDICATION_APPROVED = "Indicação Aprovada"
PROGRESS_REASONS = {
    ProgressStatus.NO_PRAZO: "Tarefa Concluída no Prazo",
    ProgressStatus.ADIANTADO: "Tarefa Concluída Adiantada",
}


def approve_indication(db: Session, indication_id: int) -> fn.ApproveIndicationResponse:
    """
    Approve a pending indication and reward the referring client with 25% of
    their monthly fee, rounded down, in points.

    Raises:
        NotFoundError: If the indication does not exist
        FunctionError: If the indication is not pending
    """
    indication = crud.indication.get_indication(db, indication_id=indication_id)
    if indication is None:
        raise NotFoundError("Indication not found")

    client = crud.user.get(db, user_id=indication.client_id)
    if client is None:
        raise NotFoundError("Client not found")

    monthly_fee = Decimal(client.monthly_fee or 0)
    points = int(math.floor(monthly_fee * INDICATION_REWARD_RATE))

    try:
        # Only one approval can move the indication out of PENDENTE
        updated = (
            db.query(Indication)
            .filter(
                Indication.id == indication_id,
                Indication.status == IndicationStatus.PENDENTE.value,
            )
            .update(
                {
                    Indication.status: IndicationStatus.CONCLUIDO.value,
                    Indication.points_awarded: points,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            db.rollback()
            raise FunctionError("Indication is not pending")

        crud.indication.add_points(db, client, points, REASON_INDICATION_APPROVED)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error approving indication {indication_id}: {e}")
        raise

    logger.info(
        f"Indication {indication_id} approved, {points} points awarded to client {client.id}"
    )
    return fn.ApproveIndicationResponse(
        message="Indication approved successfully", points_awarded=points
    )


def timeline_due_dates(start: date, duration_months: int, count: int) -> List[date]:
    """Spread count items evenly over duration_months of 30 days each."""
    total_days = duration_months * DAYS_PER_MONTH
    return [
        start + timedelta(days=math.floor(total_days / count * index))
        for index in range(count)
    ]


def build_timeline_items(
    template_items: List[TimelineTemplateItem],
    client_timeline_id: int,
    start: date,
    duration_months: int,
) -> List[TimelineItem]:
    due_dates = timeline_due_dates(start, duration_months, len(template_items))
    return [
        TimelineItem(
            client_timeline_id=client_timeline_id,
            template_item_id=template_item.id,
            title=template_item.title,
            description=template_item.description,
            due_date=due_date,
            status=TimelineItemStatus.PENDENTE.value,
        )
        for template_item, due_date in zip(template_items, due_dates)
    ]


def assign_timeline(
    db: Session, request: fn.AssignTimelineRequest, created_by: Optional[int] = None
) -> fn.AssignTimelineResponse:
    """
    Instantiate a template for a client: the client timeline, one item per
    template item, and an empty instance flow.

    Raises:
        FunctionError: If the client already has a timeline or the insert fails
        NotFoundError: If the client or the template does not exist
    """
    if crud.timeline.get_client_timeline_by_client(db, client_id=request.client_id):
        raise FunctionError("Client already has an active timeline")

    client = crud.user.get(db, user_id=request.client_id)
    if client is None:
        raise NotFoundError("Client not found")

    template = crud.timeline.get_template(db, template_id=request.template_id)
    if template is None:
        raise NotFoundError("Template not found")

    start = request.start_date
    end = add_months(start, template.duration_months)
    template_items = crud.timeline.get_template_items(db, template_id=template.id)

    try:
        timeline = ClientTimeline(
            client_id=client.id,
            template_id=template.id,
            name=template.name,
            start_date=start,
            end_date=end,
        )
        db.add(timeline)
        db.flush()

        items = build_timeline_items(
            template_items, timeline.id, start, template.duration_months
        )
        db.add_all(items)

        flow = Flow(name=template.name, client_timeline_id=timeline.id, created_by=created_by)
        db.add(flow)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error assigning template {template.id} to client {client.id}: {e}")
        raise FunctionError("Failed to create timeline items") from e

    if not items:
        logger.warning(f"No template items found for template {template.id}")

    logger.info(
        f"Timeline {timeline.id} assigned to client {client.id} with {len(items)} items"
    )
    return fn.AssignTimelineResponse(
        timeline_id=timeline.id,
        flow_id=flow.id,
        items_created=len(items),
        start_date=start,
        end_date=end,
        message=None if items else "Timeline created but no items found in template",
    )


def create_client(db: Session, request: fn.CreateClientRequest) -> fn.CreateClientResponse:
    """
    Create a client account with zero points.

    Raises:
        FunctionError: If the password is too short or the email is taken
    """
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise FunctionError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if crud.user.get_by_email(db, email=request.email):
        raise FunctionError("A user with this email already exists")

    user_in = UserCreate(
        email=request.email,
        full_name=request.full_name,
        password=request.password,
        role=UserRole.CLIENTE,
        monthly_fee=request.monthly_fee,
    )
    try:
        user = crud.user.create(db, obj_in=user_in, commit=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating client {request.email}: {e}")
        raise FunctionError("Failed to create user profile") from e

    logger.info(f"Created client {user.id} ({user.email})")
    return fn.CreateClientResponse(
        user_id=user.id, email=user.email, full_name=user.full_name
    )


def import_timeline(
    db: Session, request: fn.ImportTimelineRequest, created_by: Optional[int] = None
) -> fn.ImportTimelineResponse:
    """
    Create a template and its items from a parsed timeline, plus the
    template's flow.

    Raises:
        FunctionError: If there are no items or any item cannot be inserted
    """
    if not request.items:
        raise FunctionError(
            "Invalid timeline data: name, duration and items are required"
        )

    try:
        template = TimelineTemplate(
            name=request.name,
            duration_months=request.duration,
            description=f"Imported timeline with {len(request.items)} items",
        )
        db.add(template)
        db.flush()

        db.add_all(
            [
                TimelineTemplateItem(
                    template_id=template.id,
                    title=item.title,
                    description=item.description,
                    category=item.category.value,
                    display_order=item.display_order,
                    parent_id=item.parent_id,
                )
                for item in request.items
            ]
        )
        flow = Flow(name=request.name, template_id=template.id, created_by=created_by)
        db.add(flow)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error importing timeline {request.name}: {e}")
        raise FunctionError("Failed to create template items") from e

    logger.info(f"Imported template {template.id} with {len(request.items)} items")
    return fn.ImportTimelineResponse(
        template_id=template.id, flow_id=flow.id, items_count=len(request.items)
    )


def progress_points(progress_status: ProgressStatus, extra_points: int = 0) -> int:
    if progress_status == ProgressStatus.NO_PRAZO:
        return ON_TIME_POINTS
    if progress_status == ProgressStatus.ADIANTADO:
        return ON_TIME_POINTS + (extra_points or 0)
    return 0


def update_timeline_progress(
    db: Session, request: fn.UpdateTimelineProgressRequest
) -> fn.UpdateTimelineProgressResponse:
    """
    Record how a timeline item was delivered and credit the client:
    25 points on time, 25 plus the extra points when early, none when late.

    Raises:
        NotFoundError: If the timeline item does not exist
    """
    item = crud.timeline.get_timeline_item(db, item_id=request.timeline_item_id)
    if item is None:
        raise NotFoundError("Timeline item not found")

    points = progress_points(request.progress_status, request.extra_points)
    try:
        item.progress_status = request.progress_status.value
        db.add(item)
        if points > 0:
            client = crud.user.get(db, user_id=item.client_timeline.client_id)
            crud.indication.add_points(
                db, client, points, PROGRESS_REASONS[request.progress_status]
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating progress of item {item.id}: {e}")
        raise

    logger.info(f"Timeline item {item.id} marked {request.progress_status.value}")
    return fn.UpdateTimelineProgressResponse(
        message=f"Timeline item updated successfully. {points} points added.",
        points_added=points,
    )
