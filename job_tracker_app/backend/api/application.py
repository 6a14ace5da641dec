import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..config.settings import get_settings
from ..exceptions import TrackerError
from ..models.db.database import get_db
from ..services import application_tracker as application_service
from ..services import relationship_manager
from ..utils.api_helpers import check_resource_exists, handle_service_error
from .auth import get_current_active_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=schemas.Application, status_code=status.HTTP_201_CREATED)
def create_application(
    application: schemas.ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Create a new job application entry for the current user.

    Attaches ``resume_id`` when given and schedules the follow-up reminders
    when an application date is set.
    """
    try:
        if application.resume_id is not None:
            relationship_manager.require_resume(db, resume_id=application.resume_id, user_id=current_user.id)

        db_application = application_service.create_application_for_user(
            db=db, application=application, user_id=current_user.id
        )
        if application.resume_id is not None:
            relationship_manager.attach(
                db, user_id=current_user.id, application_id=db_application.id, resume_id=application.resume_id
            )
        if application.application_date and get_settings().auto_reminders_enabled:
            relationship_manager.create_auto_reminders(
                db, user_id=current_user.id, application_id=db_application.id,
                application_date=application.application_date,
            )
    except TrackerError as e:
        raise handle_service_error(e, "save application")
    return db_application


@router.get("/", response_model=List[schemas.ApplicationWithResumes])
def read_applications(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Retrieve all job applications for the current user, newest first, with attached resumes.
    """
    try:
        return relationship_manager.list_with_attached_resumes(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load applications")


@router.get("/{application_id}", response_model=schemas.Application)
def read_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        db_application = application_service.get_application_by_id(
            db, application_id=application_id, user_id=current_user.id
        )
    except TrackerError as e:
        raise handle_service_error(e, "load application")
    check_resource_exists(db_application, "Application")
    return db_application


@router.put("/{application_id}", response_model=schemas.Application)
def update_application(
    application_id: int,
    application: schemas.ApplicationUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Update a job application's details. Any status may move to any other status.
    """
    try:
        return application_service.update_application(
            db, application_id=application_id, application_update=application, user_id=current_user.id
        )
    except TrackerError as e:
        raise handle_service_error(e, "update application")


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        application_service.delete_application(db, application_id=application_id, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "delete application")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{application_id}/resumes", response_model=List[schemas.Resume])
def read_application_resumes(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        db_application = application_service.get_application_by_id(
            db, application_id=application_id, user_id=current_user.id
        )
        check_resource_exists(db_application, "Application")
        return relationship_manager.list_attached_resumes(
            db, user_id=current_user.id, application_id=application_id
        )
    except TrackerError as e:
        raise handle_service_error(e, "load resumes")


@router.post(
    "/{application_id}/resumes/{resume_id}",
    response_model=schemas.ApplicationResumeLink,
    status_code=status.HTTP_201_CREATED,
)
def attach_resume(
    application_id: int,
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return relationship_manager.attach(
            db, user_id=current_user.id, application_id=application_id, resume_id=resume_id
        )
    except TrackerError as e:
        raise handle_service_error(e, "attach resume")


@router.delete("/{application_id}/resumes/{resume_id}")
def detach_resume(
    application_id: int,
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
) -> Dict[str, int]:
    try:
        removed = relationship_manager.detach(
            db, user_id=current_user.id, application_id=application_id, resume_id=resume_id
        )
    except TrackerError as e:
        raise handle_service_error(e, "detach resume")
    return {"removed": removed}
