"""
Links between applications and the records that hang off them.

Covers application <-> resume links (many-to-many through
``application_resumes``) and the reminders generated when an application is
created.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import schemas
from ..config.settings import get_settings
from ..exceptions import LinkError, PartialCompoundFailure, ValidationError
from ..models.db import application as application_model
from ..models.db import notification as notification_model
from ..models.db import resume as resume_model
from ..models.db.database import store_operation
from ..utils.time_utils import parse_datetime, utcnow
from . import notification_service
from .application_tracker import require_application

logger = logging.getLogger(__name__)

JobApplication = application_model.JobApplication
Resume = resume_model.Resume
ApplicationResume = resume_model.ApplicationResume

FOLLOW_UP_NOTES = "Follow up on application status"
STATUS_CHECK_NOTES = "Check application status and consider next steps"
FOLLOW_UP_TITLE = "Follow-up Reminder"
FOLLOW_UP_MESSAGE = "Time to follow up on your application"


def require_resume(db: Session, resume_id: int, user_id: int) -> Resume:
    with store_operation(db, "load resume"):
        db_resume = db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == user_id).first()
    if db_resume is None:
        raise LinkError("Resume", resume_id)
    return db_resume


def _links(db: Session, application_id: int, resume_id: int):
    return db.query(ApplicationResume).filter(
        ApplicationResume.application_id == application_id,
        ApplicationResume.resume_id == resume_id,
    )


def attach(db: Session, user_id: int, application_id: int, resume_id: int) -> ApplicationResume:
    """
    Link a resume to an application.

    Raises:
        LinkError: the application or the resume is not the user's
    """
    require_application(db, application_id=application_id, user_id=user_id)
    require_resume(db, resume_id=resume_id, user_id=user_id)

    if not get_settings().allow_duplicate_resume_links:
        with store_operation(db, "attach resume"):
            existing = _links(db, application_id, resume_id).order_by(ApplicationResume.id).first()
        if existing is not None:
            logger.debug("Resume %s already attached to application %s", resume_id, application_id)
            return existing

    link = ApplicationResume(application_id=application_id, resume_id=resume_id, created_at=utcnow())
    with store_operation(db, "attach resume"):
        db.add(link)
        db.commit()
        db.refresh(link)
    logger.info("Attached resume %s to application %s", resume_id, application_id)
    return link


def detach(db: Session, user_id: int, application_id: int, resume_id: int) -> int:
    """Remove every link between the pair. Returns the number removed; zero is not an error."""
    with store_operation(db, "detach resume"):
        owned = (
            db.query(JobApplication.id)
            .filter(JobApplication.id == application_id, JobApplication.user_id == user_id)
            .first()
        )
        if owned is None:
            return 0
        removed = _links(db, application_id, resume_id).delete(synchronize_session=False)
        db.commit()
    if removed:
        logger.info("Detached resume %s from application %s", resume_id, application_id)
    return removed


def flatten_attached_resumes(links: List[ApplicationResume]) -> List[Resume]:
    """Resumes behind a list of link rows, skipping links whose resume is gone."""
    return [link.resume for link in links or [] if link is not None and link.resume is not None]


def list_attached_resumes(db: Session, user_id: int, application_id: int) -> List[Resume]:
    with store_operation(db, "load application resumes"):
        links = (
            db.query(ApplicationResume)
            .join(JobApplication, ApplicationResume.application_id == JobApplication.id)
            .options(selectinload(ApplicationResume.resume))
            .filter(JobApplication.id == application_id, JobApplication.user_id == user_id)
            .order_by(ApplicationResume.created_at.asc(), ApplicationResume.id.asc())
            .all()
        )
        return flatten_attached_resumes(links)


def list_with_attached_resumes(db: Session, user_id: int) -> List[schemas.ApplicationWithResumes]:
    """Every application of the user, newest first, each with its attached resumes."""
    with store_operation(db, "load applications"):
        applications = (
            db.query(JobApplication)
            .options(selectinload(JobApplication.resume_links).selectinload(ApplicationResume.resume))
            .filter(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
            .all()
        )

        results = []
        for application in applications:
            view = schemas.ApplicationWithResumes.model_validate(application)
            view.attached_resumes = [
                schemas.Resume.model_validate(resume)
                for resume in flatten_attached_resumes(application.resume_links)
            ]
            results.append(view)
        return results


def _reminder_dates(application_date: Union[str, date, datetime]) -> Tuple[datetime, datetime]:
    base = parse_datetime(application_date)
    if base is None:
        raise ValidationError(f"Invalid application date: {application_date!r}", field="application_date")
    settings = get_settings()
    return (
        base + timedelta(days=settings.follow_up_reminder_days),
        base + timedelta(days=settings.status_check_reminder_days),
    )


def create_auto_reminders(
    db: Session,
    user_id: int,
    application_id: int,
    application_date: Union[str, date, datetime],
) -> Tuple[notification_model.FollowUpReminder, notification_model.FollowUpReminder, notification_model.Notification]:
    """
    Create the standard reminders for a new application.

    Writes, in order: a follow_up reminder one week after the application
    date, a status_check reminder two weeks after it, and a follow_up
    notification at the one-week mark. The three rows commit together; if any
    step fails nothing is kept and PartialCompoundFailure names the step.

    Returns:
        (follow_up reminder, status_check reminder, notification)
    """
    follow_up_at, status_check_at = _reminder_dates(application_date)
    require_application(db, application_id=application_id, user_id=user_id)

    steps = [
        ("follow_up reminder", notification_service.build_follow_up_reminder(
            user_id,
            schemas.FollowUpReminderCreate(
                application_id=application_id,
                reminder_type="follow_up",
                scheduled_for=follow_up_at,
                notes=FOLLOW_UP_NOTES,
            ),
        )),
        ("status_check reminder", notification_service.build_follow_up_reminder(
            user_id,
            schemas.FollowUpReminderCreate(
                application_id=application_id,
                reminder_type="status_check",
                scheduled_for=status_check_at,
                notes=STATUS_CHECK_NOTES,
            ),
        )),
        ("follow_up notification", notification_service.build_notification(
            user_id,
            schemas.NotificationCreate(
                application_id=application_id,
                type="follow_up",
                title=FOLLOW_UP_TITLE,
                message=FOLLOW_UP_MESSAGE,
                scheduled_for=follow_up_at,
            ),
        )),
    ]

    completed: List[str] = []
    current: Optional[str] = None
    try:
        for name, record in steps:
            current = name
            db.add(record)
            db.flush()
            completed.append(name)
        current = "commit"
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Auto reminders for application %s failed at %s after %s: %s",
            application_id, current, completed or "no steps", e,
        )
        raise PartialCompoundFailure("create reminders", current, completed) from e

    records = [record for _, record in steps]
    for record in records:
        db.refresh(record)
    logger.info("Created auto reminders for application %s", application_id)
    return tuple(records)
