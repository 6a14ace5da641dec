"""
Notifications, interview schedules and follow-up reminders.

Every function is scoped to one user. Records that reference an application
must reference one the user owns.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from .. import schemas
from ..exceptions import NotFoundError
from ..models.db import notification as notification_model
from ..models.db.database import store_operation
from ..utils.time_utils import as_utc, utcnow
from .application_tracker import require_application

logger = logging.getLogger(__name__)

Notification = notification_model.Notification
InterviewSchedule = notification_model.InterviewSchedule
FollowUpReminder = notification_model.FollowUpReminder


# =============================================================================
# NOTIFICATIONS
# =============================================================================

def build_notification(user_id: int, data: schemas.NotificationCreate) -> Notification:
    now = utcnow()
    return Notification(
        user_id=user_id,
        application_id=data.application_id,
        type=data.type,
        title=data.title,
        message=data.message,
        scheduled_for=as_utc(data.scheduled_for),
        is_read=False,
        is_sent=False,
        created_at=now,
        updated_at=now,
    )


def _user_notifications(db: Session, user_id: int):
    return (
        db.query(Notification)
        .options(joinedload(Notification.application))
        .filter(Notification.user_id == user_id)
    )


def get_notifications(db: Session, user_id: int) -> List[Notification]:
    with store_operation(db, "load notifications"):
        return _user_notifications(db, user_id).order_by(Notification.scheduled_for.asc()).all()


def get_unread_notifications(db: Session, user_id: int) -> List[Notification]:
    with store_operation(db, "load notifications"):
        return (
            _user_notifications(db, user_id)
            .filter(Notification.is_read.is_(False))
            .order_by(Notification.scheduled_for.asc())
            .all()
        )


def create_notification(db: Session, user_id: int, data: schemas.NotificationCreate) -> Notification:
    if data.application_id is not None:
        require_application(db, application_id=data.application_id, user_id=user_id)

    db_notification = build_notification(user_id, data)
    with store_operation(db, "create notification"):
        db.add(db_notification)
        db.commit()
        db.refresh(db_notification)
    return db_notification


def mark_as_read(db: Session, user_id: int, notification_id: int) -> Notification:
    with store_operation(db, "mark notification as read"):
        db_notification = (
            _user_notifications(db, user_id).filter(Notification.id == notification_id).first()
        )
        if db_notification is None:
            raise NotFoundError("Notification")
        db_notification.is_read = True
        db_notification.updated_at = utcnow()
        db.commit()
        db.refresh(db_notification)
    return db_notification


def mark_all_as_read(db: Session, user_id: int) -> int:
    """Mark every unread notification of the user as read; returns how many changed."""
    with store_operation(db, "mark all as read"):
        changed = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({"is_read": True, "updated_at": utcnow()}, synchronize_session=False)
        )
        db.commit()
    return changed


def delete_notification(db: Session, user_id: int, notification_id: int) -> None:
    with store_operation(db, "delete notification"):
        deleted = (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    if not deleted:
        raise NotFoundError("Notification")


# =============================================================================
# INTERVIEW SCHEDULES
# =============================================================================

def _user_interviews(db: Session, user_id: int):
    return (
        db.query(InterviewSchedule)
        .options(joinedload(InterviewSchedule.application))
        .filter(InterviewSchedule.user_id == user_id)
    )


def get_interview_schedules(db: Session, user_id: int) -> List[InterviewSchedule]:
    with store_operation(db, "load interviews"):
        return _user_interviews(db, user_id).order_by(InterviewSchedule.scheduled_date.asc()).all()


def get_upcoming_interviews(db: Session, user_id: int, now: Optional[datetime] = None) -> List[InterviewSchedule]:
    now = as_utc(now) or utcnow()
    with store_operation(db, "load interviews"):
        return (
            _user_interviews(db, user_id)
            .filter(
                InterviewSchedule.status == "scheduled",
                InterviewSchedule.scheduled_date >= now,
            )
            .order_by(InterviewSchedule.scheduled_date.asc())
            .all()
        )


def create_interview_schedule(db: Session, user_id: int, data: schemas.InterviewScheduleCreate) -> InterviewSchedule:
    require_application(db, application_id=data.application_id, user_id=user_id)

    now = utcnow()
    values = data.model_dump()
    values["scheduled_date"] = as_utc(data.scheduled_date)
    db_interview = InterviewSchedule(
        **values, user_id=user_id, status="scheduled", created_at=now, updated_at=now
    )
    with store_operation(db, "create interview"):
        db.add(db_interview)
        db.commit()
        db.refresh(db_interview)
    logger.info("Scheduled %s interview %s for application %s",
                db_interview.interview_type, db_interview.id, data.application_id)
    return db_interview


def update_interview_schedule(
    db: Session, user_id: int, interview_id: int, updates: schemas.InterviewScheduleUpdate
) -> InterviewSchedule:
    with store_operation(db, "update interview"):
        db_interview = _user_interviews(db, user_id).filter(InterviewSchedule.id == interview_id).first()
        if db_interview is None:
            raise NotFoundError("Interview")

        for key, value in updates.model_dump(exclude_unset=True).items():
            if value is None and key in ("interview_type", "scheduled_date", "duration_minutes", "status"):
                continue
            if key == "scheduled_date":
                value = as_utc(value)
            setattr(db_interview, key, value)
        db_interview.updated_at = utcnow()
        db.commit()
        db.refresh(db_interview)
    return db_interview


def delete_interview_schedule(db: Session, user_id: int, interview_id: int) -> None:
    with store_operation(db, "delete interview"):
        deleted = (
            db.query(InterviewSchedule)
            .filter(InterviewSchedule.id == interview_id, InterviewSchedule.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    if not deleted:
        raise NotFoundError("Interview")


# =============================================================================
# FOLLOW-UP REMINDERS
# =============================================================================

def build_follow_up_reminder(user_id: int, data: schemas.FollowUpReminderCreate) -> FollowUpReminder:
    now = utcnow()
    return FollowUpReminder(
        user_id=user_id,
        application_id=data.application_id,
        reminder_type=data.reminder_type,
        scheduled_for=as_utc(data.scheduled_for),
        notes=data.notes,
        is_completed=False,
        created_at=now,
        updated_at=now,
    )


def _user_reminders(db: Session, user_id: int):
    return (
        db.query(FollowUpReminder)
        .options(joinedload(FollowUpReminder.application))
        .filter(FollowUpReminder.user_id == user_id)
    )


def get_follow_up_reminders(db: Session, user_id: int) -> List[FollowUpReminder]:
    with store_operation(db, "load reminders"):
        return _user_reminders(db, user_id).order_by(FollowUpReminder.scheduled_for.asc()).all()


def get_pending_reminders(db: Session, user_id: int, now: Optional[datetime] = None) -> List[FollowUpReminder]:
    """Reminders that are due and not yet completed."""
    now = as_utc(now) or utcnow()
    with store_operation(db, "load reminders"):
        return (
            _user_reminders(db, user_id)
            .filter(
                FollowUpReminder.is_completed.is_(False),
                FollowUpReminder.scheduled_for <= now,
            )
            .order_by(FollowUpReminder.scheduled_for.asc())
            .all()
        )


def create_follow_up_reminder(db: Session, user_id: int, data: schemas.FollowUpReminderCreate) -> FollowUpReminder:
    require_application(db, application_id=data.application_id, user_id=user_id)

    db_reminder = build_follow_up_reminder(user_id, data)
    with store_operation(db, "create reminder"):
        db.add(db_reminder)
        db.commit()
        db.refresh(db_reminder)
    return db_reminder


def mark_reminder_completed(db: Session, user_id: int, reminder_id: int) -> FollowUpReminder:
    with store_operation(db, "complete reminder"):
        db_reminder = _user_reminders(db, user_id).filter(FollowUpReminder.id == reminder_id).first()
        if db_reminder is None:
            raise NotFoundError("Reminder")
        db_reminder.is_completed = True
        db_reminder.updated_at = utcnow()
        db.commit()
        db.refresh(db_reminder)
    return db_reminder


def delete_follow_up_reminder(db: Session, user_id: int, reminder_id: int) -> None:
    with store_operation(db, "delete reminder"):
        deleted = (
            db.query(FollowUpReminder)
            .filter(FollowUpReminder.id == reminder_id, FollowUpReminder.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    if not deleted:
        raise NotFoundError("Reminder")
