import logging
import os
import time
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .. import schemas
from ..config.settings import get_settings
from ..exceptions import NotFoundError, StoreError, ValidationError
from ..models.db import resume as resume_model
from ..models.db.database import store_operation
from ..utils.time_utils import utcnow
from .blob_storage import BlobStorage

logger = logging.getLogger(__name__)

Resume = resume_model.Resume


def _user_resumes(db: Session, user_id: int):
    return db.query(Resume).filter(Resume.user_id == user_id)


def _remove_blob_quietly(storage: BlobStorage, path: str) -> None:
    """Best-effort blob removal: failures are logged and never raised."""
    try:
        storage.remove(path)
    except (OSError, ValueError) as e:
        logger.warning("Could not delete resume file %s from storage: %s", path, e)


def validate_resume_upload(file_name: str, content: bytes, name: str) -> str:
    """
    Check an upload before anything is stored.

    Returns:
        The file name stripped of any directory components

    Raises:
        ValidationError: missing name, unsupported extension, empty or oversized file
    """
    settings = get_settings()

    if not name or not name.strip():
        raise ValidationError("Please enter a resume name", field="name")

    safe_name = os.path.basename((file_name or "").replace("\\", "/")).strip()
    if not safe_name:
        raise ValidationError("No file selected", field="file")

    extension = os.path.splitext(safe_name)[1].lower()
    if extension not in settings.allowed_file_extensions:
        raise ValidationError(
            f"Unsupported file type '{extension or safe_name}'. "
            f"Allowed: {', '.join(settings.allowed_file_extensions)}",
            field="file",
        )

    if not content:
        raise ValidationError("Uploaded file is empty", field="file")
    if len(content) > settings.max_file_size:
        raise ValidationError(
            f"File exceeds the maximum size of {settings.max_file_size} bytes", field="file"
        )
    return safe_name


def upload_resume(
    db: Session,
    storage: BlobStorage,
    user_id: int,
    file_name: str,
    content: bytes,
    content_type: str,
    name: str,
    description: Optional[str] = None,
    version: Optional[str] = None,
) -> Resume:
    """Store the file under ``<user_id>/<millis>_<file_name>`` and record its metadata."""
    safe_name = validate_resume_upload(file_name, content, name)
    blob_path = f"{user_id}/{int(time.time() * 1000)}_{safe_name}"

    try:
        stored_path = storage.upload(blob_path, content, content_type)
    except (OSError, ValueError) as e:
        logger.error("Storage upload error for %s: %s", blob_path, e)
        raise StoreError("upload resume") from e

    now = utcnow()
    db_resume = Resume(
        user_id=user_id,
        name=name.strip(),
        file_name=safe_name,
        file_path=stored_path,
        file_size=len(content),
        file_type=content_type or "application/octet-stream",
        version=(version or "").strip() or "1.0",
        description=(description or "").strip() or None,
        is_default=False,
        created_at=now,
        updated_at=now,
    )
    try:
        with store_operation(db, "upload resume"):
            db.add(db_resume)
            db.commit()
            db.refresh(db_resume)
    except StoreError:
        # the metadata never landed, so the blob is an orphan
        _remove_blob_quietly(storage, stored_path)
        raise

    logger.info("Uploaded resume %s for user %s (%d bytes)", db_resume.id, user_id, db_resume.file_size)
    return db_resume


def get_user_resumes(db: Session, user_id: int) -> List[Resume]:
    with store_operation(db, "load resumes"):
        return _user_resumes(db, user_id).order_by(Resume.created_at.desc(), Resume.id.desc()).all()


def get_resume_by_id(db: Session, resume_id: int, user_id: int) -> Optional[Resume]:
    with store_operation(db, "load resume"):
        return _user_resumes(db, user_id).filter(Resume.id == resume_id).first()


def download_resume(db: Session, storage: BlobStorage, user_id: int, resume_id: int) -> Tuple[Resume, bytes]:
    """
    Fetch a resume's metadata together with its stored file.

    Raises:
        NotFoundError: the resume does not exist or belongs to another user
        StoreError: the file could not be read from storage
    """
    db_resume = get_resume_by_id(db, resume_id=resume_id, user_id=user_id)
    if db_resume is None:
        raise NotFoundError("Resume")

    try:
        data = storage.read(db_resume.file_path)
    except (OSError, ValueError) as e:
        logger.error("Storage read error for %s: %s", db_resume.file_path, e)
        raise StoreError("download resume") from e
    return db_resume, data


def get_default_resume(db: Session, user_id: int) -> Optional[Resume]:
    with store_operation(db, "load resumes"):
        return (
            _user_resumes(db, user_id)
            .filter(Resume.is_default.is_(True))
            .order_by(Resume.updated_at.desc())
            .first()
        )


def set_default_resume(db: Session, user_id: int, resume_id: int) -> Resume:
    """
    Make one resume the user's default.

    Clears the flag on every other resume of the user, then sets it on the
    chosen one. Both writes share a transaction. Two concurrent requests can still
    interleave at the store, in which case the later commit wins.
    """
    db_resume = get_resume_by_id(db, resume_id=resume_id, user_id=user_id)
    if db_resume is None:
        raise NotFoundError("Resume")

    now = utcnow()
    with store_operation(db, "set default resume"):
        _user_resumes(db, user_id).filter(Resume.is_default.is_(True), Resume.id != resume_id).update(
            {"is_default": False, "updated_at": now}, synchronize_session=False
        )
        db_resume.is_default = True
        db_resume.updated_at = now
        db.commit()
        db.refresh(db_resume)

    logger.info("Resume %s is now the default for user %s", resume_id, user_id)
    return db_resume


def update_resume(db: Session, resume_id: int, user_id: int, updates: schemas.ResumeUpdate) -> Resume:
    db_resume = get_resume_by_id(db, resume_id=resume_id, user_id=user_id)
    if db_resume is None:
        raise NotFoundError("Resume")

    update_data = updates.model_dump(exclude_unset=True)
    make_default = update_data.pop("is_default", None)

    for key, value in update_data.items():
        if key in ("name", "version") and value is None:
            continue
        setattr(db_resume, key, value)
    if make_default is False:
        db_resume.is_default = False
    db_resume.updated_at = utcnow()

    with store_operation(db, "update resume"):
        db.commit()
        db.refresh(db_resume)

    if make_default:
        db_resume = set_default_resume(db, user_id=user_id, resume_id=resume_id)
    return db_resume


def delete_resume(db: Session, storage: BlobStorage, user_id: int, resume_id: int) -> None:
    """Remove the stored file (best effort), then the metadata and its application links."""
    db_resume = get_resume_by_id(db, resume_id=resume_id, user_id=user_id)
    if db_resume is None:
        raise NotFoundError("Resume")

    _remove_blob_quietly(storage, db_resume.file_path)

    with store_operation(db, "delete resume"):
        db.delete(db_resume)
        db.commit()
    logger.info("Deleted resume %s for user %s", resume_id, user_id)
