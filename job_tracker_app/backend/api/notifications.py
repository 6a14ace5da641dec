from typing import Dict, List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..exceptions import TrackerError
from ..models.db.database import get_db
from ..services import notification_service
from ..utils.api_helpers import handle_service_error
from .auth import get_current_active_user

router = APIRouter()


@router.get("/", response_model=List[schemas.Notification])
def read_notifications(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.get_notifications(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load notifications")


@router.get("/unread", response_model=List[schemas.Notification])
def read_unread_notifications(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.get_unread_notifications(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load notifications")


@router.post("/", response_model=schemas.Notification, status_code=status.HTTP_201_CREATED)
def create_notification(
    notification: schemas.NotificationCreate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.create_notification(db, user_id=current_user.id, data=notification)
    except TrackerError as e:
        raise handle_service_error(e, "create notification")


@router.post("/read-all")
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
) -> Dict[str, int]:
    try:
        updated = notification_service.mark_all_as_read(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "mark all as read")
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=schemas.Notification)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.mark_as_read(db, user_id=current_user.id, notification_id=notification_id)
    except TrackerError as e:
        raise handle_service_error(e, "mark notification as read")


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        notification_service.delete_notification(db, user_id=current_user.id, notification_id=notification_id)
    except TrackerError as e:
        raise handle_service_error(e, "delete notification")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
