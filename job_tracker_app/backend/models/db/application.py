from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from ...utils.time_utils import utcnow


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    company = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False)
    portal_url = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="applied", index=True)
    deadline = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    salary = Column(String, nullable=True)
    location = Column(String, nullable=True)
    application_date = Column(Date, nullable=True)
    job_type = Column(String(20), nullable=False, default="full-time")
    source = Column(String, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    resume_links = relationship(
        "ApplicationResume", back_populates="application", cascade="all, delete-orphan"
    )
    interviews = relationship(
        "InterviewSchedule", back_populates="application", cascade="all, delete-orphan"
    )
    follow_up_reminders = relationship(
        "FollowUpReminder", back_populates="application", cascade="all, delete-orphan"
    )
    notifications = relationship(
        "Notification", back_populates="application", cascade="all, delete-orphan"
    )
