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


@router.get("/", response_model=List[schemas.InterviewSchedule])
def read_interviews(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.get_interview_schedules(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load interviews")


@router.get("/upcoming", response_model=List[schemas.InterviewSchedule])
def read_upcoming_interviews(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Scheduled interviews that have not happened yet, soonest first.
    """
    try:
        return notification_service.get_upcoming_interviews(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load interviews")


@router.post("/", response_model=schemas.InterviewSchedule, status_code=status.HTTP_201_CREATED)
def create_interview(
    interview: schemas.InterviewScheduleCreate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.create_interview_schedule(db, user_id=current_user.id, data=interview)
    except TrackerError as e:
        raise handle_service_error(e, "create interview")


@router.put("/{interview_id}", response_model=schemas.InterviewSchedule)
def update_interview(
    interview_id: int,
    updates: schemas.InterviewScheduleUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return notification_service.update_interview_schedule(
            db, user_id=current_user.id, interview_id=interview_id, updates=updates
        )
    except TrackerError as e:
        raise handle_service_error(e, "update interview")


@router.delete("/{interview_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_interview(
    interview_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        notification_service.delete_interview_schedule(db, user_id=current_user.id, interview_id=interview_id)
    except TrackerError as e:
        raise handle_service_error(e, "delete interview")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
