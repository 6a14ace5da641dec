import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import schemas
from ..exceptions import LinkError, NotFoundError
from ..models.db import application as application_model
from ..models.db.database import store_operation
from ..utils.time_utils import utcnow
from . import analytics_service

logger = logging.getLogger(__name__)

JobApplication = application_model.JobApplication


def _user_applications(db: Session, user_id: int):
    return db.query(JobApplication).filter(JobApplication.user_id == user_id)


def get_application_by_id(db: Session, application_id: int, user_id: int) -> Optional[JobApplication]:
    with store_operation(db, "load application"):
        return _user_applications(db, user_id).filter(JobApplication.id == application_id).first()


def get_applications_for_user(
    db: Session, user_id: int, skip: int = 0, limit: Optional[int] = 100
) -> List[JobApplication]:
    """Newest first. ``limit=None`` returns every application from ``skip`` on."""
    with store_operation(db, "load applications"):
        query = (
            _user_applications(db, user_id)
            .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


def create_application_for_user(db: Session, application: schemas.ApplicationCreate, user_id: int) -> JobApplication:
    data = application.model_dump(exclude={"resume_id"})
    now = utcnow()
    db_application = JobApplication(**data, user_id=user_id, created_at=now, updated_at=now)
    with store_operation(db, "save application"):
        db.add(db_application)
        db.commit()
        db.refresh(db_application)
    logger.info("Created application %s for user %s", db_application.id, user_id)
    return db_application


def update_application(
    db: Session, application_id: int, application_update: schemas.ApplicationUpdate, user_id: int
) -> JobApplication:
    db_application = get_application_by_id(db, application_id=application_id, user_id=user_id)
    if db_application is None:
        raise NotFoundError("Application")

    update_data = application_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        # explicit nulls cannot clear required columns
        if value is None and key in ("company", "role", "status", "job_type", "priority"):
            continue
        setattr(db_application, key, value)
    db_application.updated_at = max(utcnow(), db_application.created_at)

    with store_operation(db, "update application"):
        db.commit()
        db.refresh(db_application)
    return db_application


def delete_application(db: Session, application_id: int, user_id: int) -> None:
    """Delete an application; its resume links and reminders go with it."""
    db_application = get_application_by_id(db, application_id=application_id, user_id=user_id)
    if db_application is None:
        raise NotFoundError("Application")
    with store_operation(db, "delete application"):
        db.delete(db_application)
        db.commit()
    logger.info("Deleted application %s for user %s", application_id, user_id)


def get_dashboard_stats(db: Session, user_id: int) -> schemas.DashboardStats:
    with store_operation(db, "load applications"):
        applications = _user_applications(db, user_id).all()

    total = len(applications)
    interviews = sum(1 for app in applications if app.status == "interview")
    offers = sum(1 for app in applications if app.status == "offer")
    rejected = sum(1 for app in applications if app.status == "rejected")

    return schemas.DashboardStats(
        total_applications=total,
        interviews_scheduled=interviews,
        offers_received=offers,
        rejection_rate=(rejected / total) * 100 if total > 0 else 0.0,
        recent_applications=[
            schemas.Application.model_validate(app)
            for app in analytics_service.recent_applications(applications)
        ],
    )


def require_application(db: Session, application_id: int, user_id: int) -> JobApplication:
    """Return the user's application or raise LinkError for a dangling reference."""
    db_application = get_application_by_id(db, application_id=application_id, user_id=user_id)
    if db_application is None:
        raise LinkError("Application", application_id)
    return db_application
