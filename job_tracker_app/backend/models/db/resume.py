from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from ...utils.time_utils import utcnow


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    # path inside blob storage, not a local filesystem path
    file_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    file_type = Column(String, nullable=False)
    version = Column(String, nullable=False, default="1.0")
    is_default = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    application_links = relationship(
        "ApplicationResume", back_populates="resume", cascade="all, delete-orphan"
    )


class ApplicationResume(Base):
    """Link row between an application and a resume. No uniqueness constraint."""

    __tablename__ = "application_resumes"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(
        Integer, ForeignKey("job_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    resume_id = Column(
        Integer, ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)

    application = relationship("JobApplication", back_populates="resume_links")
    resume = relationship("Resume", back_populates="application_links")
