from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..exceptions import TrackerError
from ..models.db.database import get_db
from ..services import notification_service
from ..utils.api_helpers import handle_service_error
from .auth import get_current_active_user

router = APIRouter()


@router.get("/", response_model=List[schemas.FollowUpReminder])
def read_reminders(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.get_follow_up_reminders(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load reminders")


@router.get("/pending", response_model=List[schemas.FollowUpReminder])
def read_pending_reminders(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Reminders that are due and still open.
    """
    try:
        return notification_service.get_pending_reminders(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load reminders")


@router.post("/", response_model=schemas.FollowUpReminder, status_code=status.HTTP_201_CREATED)
def create_reminder(
    reminder: schemas.FollowUpReminderCreate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.create_follow_up_reminder(db, user_id=current_user.id, data=reminder)
    except TrackerError as e:
        raise handle_service_error(e, "create reminder")


@router.post("/{reminder_id}/complete", response_model=schemas.FollowUpReminder)
def complete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.mark_reminder_completed(db, user_id=current_user.id, reminder_id=reminder_id)
    except TrackerError as e:
        raise handle_service_error(e, "complete reminder")


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        notification_service.delete_follow_up_reminder(db, user_id=current_user.id, reminder_id=reminder_id)
    except TrackerError as e:
        raise handle_service_error(e, "delete reminder")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
